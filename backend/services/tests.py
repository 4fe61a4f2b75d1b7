from unittest.mock import MagicMock, patch

import requests
from django.test import SimpleTestCase, TestCase, override_settings

from professionals.models import Professional
from service_requests.models import Match, ServiceRequest
from services.geocoding import GeocodingError, geocode_address
from services.notifications import build_response_links, notify_offer
from services.notifications.mailer import send_mail


def provider_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@override_settings(GOOGLE_MAPS_API_KEY='maps-key')
class GeocodingTests(SimpleTestCase):
    @patch('services.geocoding.requests.get')
    def test_returns_first_result_location(self, mock_get):
        mock_get.return_value = provider_response({
            'status': 'OK',
            'results': [{'geometry': {'location': {'lat': 35.66, 'lng': 139.70}}}],
        })

        self.assertEqual(geocode_address('Tokyo, Shibuya'), (35.66, 139.70))
        self.assertEqual(mock_get.call_args.kwargs['params']['address'], 'Tokyo, Shibuya')

    @patch('services.geocoding.requests.get')
    def test_zero_results_is_an_error(self, mock_get):
        mock_get.return_value = provider_response({'status': 'ZERO_RESULTS', 'results': []})

        with self.assertRaises(GeocodingError) as ctx:
            geocode_address('nowhere')
        self.assertEqual(ctx.exception.provider_status, 'ZERO_RESULTS')

    @patch('services.geocoding.requests.get', side_effect=requests.ConnectionError('down'))
    def test_unreachable_provider_is_an_error(self, mock_get):
        with self.assertRaises(GeocodingError) as ctx:
            geocode_address('Tokyo')
        self.assertEqual(ctx.exception.provider_status, 'UNREACHABLE')

    @override_settings(GOOGLE_MAPS_API_KEY='')
    def test_missing_key_is_an_error(self):
        with self.assertRaises(GeocodingError) as ctx:
            geocode_address('Tokyo')
        self.assertEqual(ctx.exception.provider_status, 'NOT_CONFIGURED')


@override_settings(APP_BASE_URL='https://miles.example.com/')
class OfferNotifierTests(TestCase):
    def setUp(self):
        professional = Professional.objects.create(
            name='near', email='near@example.com', line_user_id='U-near', latitude=35.678, longitude=139.70
        )
        service_request = ServiceRequest.objects.create(
            client_name='Hanako', client_email='hanako@example.com', address='Tokyo, Shibuya',
            latitude=35.66, longitude=139.70,
        )
        self.match = Match.objects.create(
            request=service_request, professional=professional, expires_at='2030-01-01T00:00:00Z'
        )

    def test_links_point_at_respond_endpoint(self):
        accept, reject = build_response_links(self.match.id)

        self.assertEqual(
            accept,
            'https://miles.example.com/api/match/respond/?id=%s&status=accept' % self.match.id
        )
        self.assertTrue(reject.endswith('status=reject'))

    @patch('services.notifications.offer_notifier.push_text', return_value=True)
    @patch('services.notifications.offer_notifier.send_mail', return_value=True)
    def test_both_channels_carry_address_links_and_notice(self, mock_mail, mock_push):
        delivery = notify_offer(self.match)

        self.assertTrue(delivery.email)
        self.assertTrue(delivery.line)

        html = mock_mail.call_args.kwargs['html']
        line_user_id, text = mock_push.call_args.args
        self.assertEqual(line_user_id, 'U-near')
        for body in (html, text):
            self.assertIn('Tokyo, Shibuya', body)
            self.assertIn('status=accept', body)
            self.assertIn('status=reject', body)
            self.assertIn('another professional accepts', body)

    @patch('services.notifications.offer_notifier.push_text', return_value=True)
    @patch('services.notifications.offer_notifier.send_mail', side_effect=requests.HTTPError('422'))
    def test_one_failing_channel_does_not_stop_the_other(self, mock_mail, mock_push):
        delivery = notify_offer(self.match)

        self.assertFalse(delivery.email)
        self.assertTrue(delivery.line)

    @patch('services.notifications.offer_notifier.push_text')
    @patch('services.notifications.offer_notifier.send_mail', return_value=True)
    def test_line_is_skipped_without_user_id(self, mock_mail, mock_push):
        self.match.professional.line_user_id = None

        delivery = notify_offer(self.match)

        mock_push.assert_not_called()
        self.assertTrue(delivery.email)
        self.assertFalse(delivery.line)


class MailerTests(SimpleTestCase):
    @override_settings(RESEND_API_KEY='')
    @patch('services.notifications.mailer.requests.post')
    def test_dry_run_without_api_key(self, mock_post):
        self.assertFalse(send_mail('near@example.com', 'subject', '<p>hi</p>'))
        mock_post.assert_not_called()

    @override_settings(RESEND_API_KEY='re_test', MAIL_FROM='Miles <no-reply@example.com>')
    @patch('services.notifications.mailer.requests.post')
    def test_posts_to_resend(self, mock_post):
        mock_post.return_value = provider_response({'id': 'email-1'})

        self.assertTrue(send_mail('near@example.com', 'subject', '<p>hi</p>'))

        body = mock_post.call_args.kwargs['json']
        self.assertEqual(body['from'], 'Miles <no-reply@example.com>')
        self.assertEqual(body['to'], 'near@example.com')
        self.assertEqual(mock_post.call_args.kwargs['headers']['Authorization'], 'Bearer re_test')
