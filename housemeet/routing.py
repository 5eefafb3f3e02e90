"""Channel routing for live scoreboard websockets."""

from django.urls import re_path

from . import consumers

websocket_urlpatterns = [
    re_path(r"^ws/scoreboard/$", consumers.ScoreboardConsumer.as_asgi()),
]
