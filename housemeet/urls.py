"""URL configuration for the housemeet app."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import api, views

app_name = "housemeet"

router = DefaultRouter()
router.register(r"houses", api.HouseViewSet, basename="house")
router.register(r"events", api.EventViewSet, basename="event")
router.register(r"participants", api.ParticipantViewSet, basename="participant")
router.register(r"results", api.ResultViewSet, basename="result")

urlpatterns = [
    path("api/standings/", api.StandingsView.as_view(), name="standings"),
    path("api/", include(router.urls)),
    path("exports/results.csv", views.export_results_csv, name="export-results-csv"),
    path("exports/standings.csv", views.export_standings_csv, name="export-standings-csv"),
]
