"""REST API views for the house meet application."""

from __future__ import annotations

from django.db.models import Count, F
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from . import models, scoring, serializers, services
from .permissions import IsAdministratorOrReadOnly, IsOfficialOrReadOnly


class HouseViewSet(viewsets.ModelViewSet):
    serializer_class = serializers.HouseSerializer
    permission_classes = [IsAdministratorOrReadOnly]

    def get_queryset(self):
        return models.House.objects.annotate(participant_count=Count("participants"))


class ParticipantViewSet(viewsets.ModelViewSet):
    serializer_class = serializers.ParticipantSerializer
    permission_classes = [IsAdministratorOrReadOnly]

    def get_queryset(self):
        queryset = models.Participant.objects.select_related("house")
        house_id = self.request.query_params.get("house")
        if house_id:
            queryset = queryset.filter(house_id=house_id)
        return queryset


class EventViewSet(viewsets.ModelViewSet):
    serializer_class = serializers.EventSerializer
    permission_classes = [IsAdministratorOrReadOnly]

    def get_queryset(self):
        queryset = models.Event.objects.all()
        if self.request.query_params.get("active") in {"1", "true", "yes"}:
            queryset = queryset.filter(is_active=True)
        return queryset

    @action(detail=True, methods=["get", "post"], permission_classes=[IsOfficialOrReadOnly])
    def results(self, request, pk=None):
        event = self.get_object()
        if request.method == "POST":
            submission = serializers.ResultSubmissionSerializer(data=request.data)
            submission.is_valid(raise_exception=True)
            try:
                stored = services.submit_event_results(
                    event,
                    submission.validated_data["results"],
                    user=request.user,
                )
            except scoring.OutcomeValidationError as exc:
                raise ValidationError({"results": [str(exc)]}) from exc
            rows = models.Result.objects.filter(pk__in=[row.pk for row in stored])
        else:
            rows = event.results.all()
        rows = rows.select_related("event", "participant__house")
        return Response(serializers.ResultSerializer(rows, many=True).data)

    @action(detail=True, methods=["get", "post"], permission_classes=[IsOfficialOrReadOnly])
    def lanes(self, request, pk=None):
        event = self.get_object()
        if request.method == "POST":
            payload = serializers.LaneAssignmentSerializer(data=request.data)
            payload.is_valid(raise_exception=True)
            try:
                services.assign_lanes(event, payload.validated_data["assignments"])
            except services.LaneAssignmentError as exc:
                raise ValidationError({"assignments": [str(exc)]}) from exc
        rows = event.lanes.select_related("participant__house")
        return Response(serializers.LaneSerializer(rows, many=True).data)


class ResultViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = serializers.ResultSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return models.Result.objects.select_related("event", "participant__house").order_by(
            "event__event_order",
            "event_id",
            F("position").asc(nulls_last=True),
            F("time_seconds").asc(nulls_last=True),
            "pk",
        )


class StandingsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        house = request.query_params.get("house")
        if house == "all":
            house = None
        top = request.query_params.get("top")
        try:
            top_n = int(top) if top else None
        except ValueError:
            top_n = -1
        if top_n is not None and top_n < 0:
            return Response({"top": ["Must be a whole number."]}, status=status.HTTP_400_BAD_REQUEST)
        standings = services.load_standings(house=house or None, top_n=top_n)
        return Response(serializers.StandingsSerializer(standings).data)
