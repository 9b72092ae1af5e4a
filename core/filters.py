import django_filters

from core.models import Training, TrainingIntensity


class TrainingFilter(django_filters.FilterSet):
    athlete = django_filters.NumberFilter(field_name="athlete_id")
    intensity = django_filters.ChoiceFilter(field_name="intensity", choices=TrainingIntensity.choices)
    type = django_filters.CharFilter(field_name="type", lookup_expr="iexact")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Training
        fields = []
