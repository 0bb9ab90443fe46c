from django.urls import path

from .consumers import UploadStatusConsumer

websocket_urlpatterns = [
    path("ws/uploads/<int:upload_id>/", UploadStatusConsumer.as_asgi(), name="upload-status"),
]
