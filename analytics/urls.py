from django.urls import path

from analytics.views import AthleteGoalsView, AthleteInsightsView, AthleteRecommendationsView

urlpatterns = [
    # Dashboard de insights: /api/analytics/athletes/<id>/insights/
    path("athletes/<int:athlete_id>/insights/", AthleteInsightsView.as_view(), name="athlete_insights"),
    path(
        "athletes/<int:athlete_id>/insights/recommendations/",
        AthleteRecommendationsView.as_view(),
        name="athlete_insights_recommendations",
    ),
    path("athletes/<int:athlete_id>/insights/goals/", AthleteGoalsView.as_view(), name="athlete_insights_goals"),
]
