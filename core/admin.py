from django.contrib import admin
from django.utils.html import format_html

from core.models import Athlete, Training

# ==============================================================================
#  CONFIGURACIÓN DEL PANEL DE ADMINISTRACIÓN
# ==============================================================================


def _status_badge(obj):
    if obj.is_active:
        return format_html('<span style="color: {};">{}</span>', "#16a34a", "● Activo")
    return format_html('<span style="color: {};">{}</span>', "#9ca3af", "○ Desactivado")


class TrainingInline(admin.TabularInline):
    model = Training
    extra = 0
    fields = ("type", "duration_minutes", "intensity", "created_at", "deleted_at")
    readonly_fields = ("created_at", "deleted_at")
    show_change_link = True


@admin.register(Athlete)
class AthleteAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "date_of_birth", "estado_visual", "created_at")
    list_filter = (("deleted_at", admin.EmptyFieldListFilter),)
    search_fields = ("name", "email")
    readonly_fields = ("created_at", "updated_at", "deleted_at")
    inlines = [TrainingInline]

    def estado_visual(self, obj):
        return _status_badge(obj)
    estado_visual.short_description = "Estado"


@admin.register(Training)
class TrainingAdmin(admin.ModelAdmin):
    list_display = ("created_at", "athlete", "type", "duration_minutes", "intensity", "estado_visual")
    list_filter = ("intensity", ("deleted_at", admin.EmptyFieldListFilter))
    search_fields = ("type", "athlete__name", "athlete__email")
    list_select_related = ("athlete",)
    readonly_fields = ("created_at", "updated_at", "deleted_at")

    def estado_visual(self, obj):
        return _status_badge(obj)
    estado_visual.short_description = "Estado"
