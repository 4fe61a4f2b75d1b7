import uuid

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.test import TestCase

from service_requests.models import ServiceRequest
from .notifications import notify_request_event, request_group_name
from .routing import websocket_urlpatterns


class RequestEventTests(TestCase):
    def setUp(self):
        self.service_request = ServiceRequest.objects.create(
            client_name='Hanako',
            client_email='hanako@example.com',
            address='Tokyo, Shibuya',
            latitude=35.66,
            longitude=139.70,
        )

    def test_event_reaches_request_group(self):
        layer = get_channel_layer()
        channel = async_to_sync(layer.new_channel)()
        async_to_sync(layer.group_add)(request_group_name(self.service_request.id), channel)

        sent = notify_request_event('matching_exhausted', self.service_request, 'No one nearby yet.')
        message = async_to_sync(layer.receive)(channel)

        self.assertTrue(sent)
        self.assertEqual(message['type'], 'matching_exhausted')
        self.assertEqual(message['request_id'], str(self.service_request.id))
        self.assertEqual(message['status'], 'pending')
        self.assertEqual(message['message'], 'No one nearby yet.')
        self.assertEqual(message['request_data']['address'], 'Tokyo, Shibuya')


class RequestConsumerTests(TestCase):
    async def _connect(self, path):
        communicator = WebsocketCommunicator(URLRouter(websocket_urlpatterns), path)
        connected, _ = await communicator.connect()
        await communicator.disconnect()
        return connected

    def test_connection_without_client_email_is_refused(self):
        connected = async_to_sync(self._connect)('/ws/requests/%s/' % uuid.uuid4())
        self.assertFalse(connected)
