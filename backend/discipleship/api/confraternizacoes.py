"""
Confraternização API — events and the one a congregation is working towards.
"""
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from discipleship.api.responses import congregation_scope
from discipleship.models import Confraternizacao
from discipleship.serializers import ConfraternizacaoSerializer
from discipleship.services.confraternizacao import active_confraternizacao, days_until
from discipleship.utils import utcnow


class ConfraternizacaoListCreateView(APIView):

    def get(self, request):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        events = Confraternizacao.objects.filter(congregation_id=congregation_id).order_by("data_evento")
        return Response(ConfraternizacaoSerializer(events, many=True).data)

    def post(self, request):
        serializer = ConfraternizacaoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = serializer.save()
        return Response(ConfraternizacaoSerializer(event).data, status=status.HTTP_201_CREATED)


class ActiveConfraternizacaoView(APIView):
    """The active or next upcoming event, with its countdown."""

    def get(self, request):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        today = utcnow().date()
        event = active_confraternizacao(congregation_id, today)
        if event is None:
            return Response(None)
        data = ConfraternizacaoSerializer(event).data
        data["days_until"] = days_until(event.data_evento, today)
        return Response(data)
