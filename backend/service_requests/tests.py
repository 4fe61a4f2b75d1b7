import uuid
from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient, APIRequestFactory, force_authenticate

from professionals.models import PlanRequirement, Professional
from professionals.services import Candidate
from services.geocoding import GeocodingError
from services.matching import (
	ALREADY_RESOLVED,
	NO_MORE_CANDIDATES,
	OFFERED,
	AdvanceResult,
	MatchingConflictError,
	advance,
	sweep_expired,
)
from services.notifications import OfferDelivery
from services.request_management import (
	ALREADY_FINALIZED,
	EXPIRED,
	MATCHED,
	NOT_FOUND,
	REJECTED,
	respond_to_match,
)
from .models import Match, ServiceRequest, extract_plan_title
from .tasks import sweep_expired_matches_task
from .views import AdminRequestListView, respond

User = get_user_model()

# Shibuya; candidates sit due north at roughly 2km, 10km and 80km
ORIGIN = (35.66, 139.70)


def make_professional(name, lat, lng, **kwargs):
	return Professional.objects.create(
		name=name,
		email='%s@example.com' % name,
		latitude=lat,
		longitude=lng,
		**kwargs
	)


def make_request(**kwargs):
	data = {
		'client_name': 'Hanako',
		'client_email': 'hanako@example.com',
		'address': 'Tokyo, Shibuya',
		'latitude': ORIGIN[0],
		'longitude': ORIGIN[1],
		'note': '[サービス] Real estate photos (20 cuts)',
	}
	data.update(kwargs)
	return ServiceRequest.objects.create(**data)


def make_match(service_request, professional, status=Match.STATUS_WAITING, expires_in=timedelta(minutes=7)):
	return Match.objects.create(
		request=service_request,
		professional=professional,
		status=status,
		expires_at=timezone.now() + expires_in,
	)


class MatchingTestCase(TestCase):
	def setUp(self):
		self.near = make_professional('near', 35.678, 139.70, line_user_id='U-near')
		self.mid = make_professional('mid', 35.75, 139.70)
		self.far = make_professional('far', 36.38, 139.70)
		self.service_request = make_request()

		patcher = patch(
			'services.matching.offer_dispatch.notify_offer',
			return_value=OfferDelivery(email=True, line=False)
		)
		self.notify = patcher.start()
		self.addCleanup(patcher.stop)


class AdvanceTests(MatchingTestCase):
	def test_advance_offers_nearest_candidate_with_seven_minute_window(self):
		before = timezone.now()
		result = advance(self.service_request.id, radius_km=50)
		after = timezone.now()

		self.assertEqual(result.outcome, OFFERED)
		match = result.match
		self.assertEqual(match.professional, self.near)
		self.assertEqual(match.status, Match.STATUS_WAITING)
		self.assertAlmostEqual(match.distance_km, 2.0, delta=0.1)
		self.assertGreaterEqual(match.expires_at, before + timedelta(minutes=7))
		self.assertLessEqual(match.expires_at, after + timedelta(minutes=7))
		self.notify.assert_called_once()

		match.refresh_from_db()
		self.assertTrue(match.email_sent)
		self.assertFalse(match.line_sent)
		self.assertEqual(self.service_request.matches.count(), 1)

	def test_advance_skips_professionals_already_offered(self):
		make_match(self.service_request, self.near, status=Match.STATUS_REJECTED)

		result = advance(self.service_request.id, radius_km=50)

		self.assertEqual(result.outcome, OFFERED)
		self.assertEqual(result.match.professional, self.mid)

	def test_expired_offer_is_never_re_offered(self):
		make_match(self.service_request, self.near, status=Match.STATUS_EXPIRED)
		make_match(self.service_request, self.mid, status=Match.STATUS_REJECTED)

		result = advance(self.service_request.id, radius_km=50)

		self.assertEqual(result.outcome, NO_MORE_CANDIDATES)
		self.service_request.refresh_from_db()
		self.assertEqual(self.service_request.status, ServiceRequest.STATUS_PENDING)
		self.assertEqual(self.service_request.matches.count(), 2)
		self.notify.assert_not_called()

	def test_advance_with_nobody_in_radius_creates_nothing(self):
		lonely = make_request(latitude=43.06, longitude=141.35)  # Sapporo

		result = advance(lonely.id, radius_km=50)

		self.assertEqual(result.outcome, NO_MORE_CANDIDATES)
		self.assertFalse(Match.objects.filter(request=lonely).exists())

	def test_advance_on_matched_request_is_already_resolved(self):
		self.service_request.status = ServiceRequest.STATUS_MATCHED
		self.service_request.save(update_fields=['status'])

		result = advance(self.service_request.id)

		self.assertEqual(result.outcome, ALREADY_RESOLVED)
		self.assertFalse(self.service_request.matches.exists())

	def test_advance_on_unknown_request_is_already_resolved(self):
		result = advance(uuid.uuid4())
		self.assertEqual(result.outcome, ALREADY_RESOLVED)

	def test_advance_rejects_non_positive_radius(self):
		with self.assertRaises(ValueError):
			advance(self.service_request.id, radius_km=0)
		with self.assertRaises(ValueError):
			advance(self.service_request.id, radius_km=-5)

	def test_advance_uses_default_radius(self):
		with self.settings(MATCH_DEFAULT_RADIUS_KM=1):
			result = advance(self.service_request.id)
		self.assertEqual(result.outcome, NO_MORE_CANDIDATES)

	def test_plan_requirements_filter_candidates(self):
		PlanRequirement.objects.create(service='photo', plan_key='photo-20', required_labels=['drone'])
		self.mid.labels = ['drone', 'real_estate']
		self.mid.save(update_fields=['labels'])
		service_request = make_request(service='photo', plan_key='photo-20')

		result = advance(service_request.id, radius_km=50)

		self.assertEqual(result.outcome, OFFERED)
		self.assertEqual(result.match.professional, self.mid)

	def test_inactive_professionals_are_not_offered(self):
		self.near.is_active = False
		self.near.save(update_fields=['is_active'])

		result = advance(self.service_request.id, radius_km=50)

		self.assertEqual(result.match.professional, self.mid)

	@patch('services.matching.offer_dispatch.select_next_candidate')
	def test_advance_reselects_when_candidate_was_taken_concurrently(self, mock_select):
		# Another advance already offered the near professional
		make_match(self.service_request, self.near)
		mock_select.side_effect = [
			Candidate(professional=self.near, distance_km=2.0),
			Candidate(professional=self.mid, distance_km=10.0),
		]

		result = advance(self.service_request.id, radius_km=50)

		self.assertEqual(result.outcome, OFFERED)
		self.assertEqual(result.match.professional, self.mid)
		self.assertEqual(mock_select.call_count, 2)
		self.assertEqual(Match.objects.filter(request=self.service_request, professional=self.near).count(), 1)

	@patch('services.matching.offer_dispatch.select_next_candidate')
	def test_advance_gives_up_after_repeated_conflicts(self, mock_select):
		make_match(self.service_request, self.near)
		mock_select.return_value = Candidate(professional=self.near, distance_km=2.0)

		with self.assertRaises(MatchingConflictError):
			advance(self.service_request.id, radius_km=50)

	@patch('services.matching.offer_dispatch.select_next_candidate')
	def test_advance_stops_when_request_is_matched_while_offering(self, mock_select):
		def pick_then_lose_request(service_request, radius_km):
			ServiceRequest.objects.filter(pk=service_request.pk).update(status=ServiceRequest.STATUS_MATCHED)
			return Candidate(professional=self.near, distance_km=2.0)

		mock_select.side_effect = pick_then_lose_request

		result = advance(self.service_request.id, radius_km=50)

		self.assertEqual(result.outcome, ALREADY_RESOLVED)
		self.assertIsNone(result.match)
		self.assertFalse(self.service_request.matches.exists())
		self.notify.assert_not_called()

	def test_notification_failure_does_not_abort_offer(self):
		self.notify.side_effect = RuntimeError('smtp down')

		result = advance(self.service_request.id, radius_km=50)

		self.assertEqual(result.outcome, OFFERED)
		result.match.refresh_from_db()
		self.assertFalse(result.match.email_sent)
		self.assertEqual(result.match.status, Match.STATUS_WAITING)

	def test_duplicate_offer_is_refused_by_database(self):
		make_match(self.service_request, self.near)
		with self.assertRaises(IntegrityError):
			with transaction.atomic():
				make_match(self.service_request, self.near, status=Match.STATUS_EXPIRED)


class RespondTests(MatchingTestCase):
	def test_accept_matches_request_and_expires_other_waiting_offers(self):
		accepted = make_match(self.service_request, self.mid)
		other = make_match(self.service_request, self.near)

		result = respond_to_match(accepted.id, 'accept')

		self.assertEqual(result.outcome, MATCHED)
		self.assertEqual(result.message, 'Thank you. The match is confirmed.')

		accepted.refresh_from_db()
		other.refresh_from_db()
		self.service_request.refresh_from_db()

		self.assertEqual(accepted.status, Match.STATUS_ACCEPTED)
		self.assertIsNotNone(accepted.responded_at)
		self.assertEqual(other.status, Match.STATUS_EXPIRED)
		self.assertEqual(self.service_request.status, ServiceRequest.STATUS_MATCHED)
		self.assertIsNotNone(self.service_request.matched_at)

	def test_reject_marks_rejected_and_offers_next_candidate(self):
		first = advance(self.service_request.id, radius_km=50).match
		self.assertEqual(first.professional, self.near)

		result = respond_to_match(first.id, 'reject')

		self.assertEqual(result.outcome, REJECTED)
		self.assertEqual(result.next_outcome, OFFERED)

		first.refresh_from_db()
		self.assertEqual(first.status, Match.STATUS_REJECTED)

		waiting = self.service_request.matches.filter(status=Match.STATUS_WAITING)
		self.assertEqual([m.professional for m in waiting], [self.mid])
		# 80km candidate stays outside the default radius
		self.assertFalse(self.service_request.matches.filter(professional=self.far).exists())

	@patch('services.request_management.offer_response.advance', side_effect=RuntimeError('db hiccup'))
	def test_reject_is_reported_even_if_follow_up_advance_fails(self, mock_advance):
		match = make_match(self.service_request, self.near)

		result = respond_to_match(match.id, 'reject')

		self.assertEqual(result.outcome, REJECTED)
		self.assertIsNone(result.next_outcome)
		mock_advance.assert_called_once_with(self.service_request.pk)
		match.refresh_from_db()
		self.assertEqual(match.status, Match.STATUS_REJECTED)

	def test_reject_on_last_candidate_reports_exhaustion(self):
		make_match(self.service_request, self.mid, status=Match.STATUS_REJECTED)
		match = make_match(self.service_request, self.near)

		result = respond_to_match(match.id, 'reject')

		self.assertEqual(result.outcome, REJECTED)
		self.assertEqual(result.next_outcome, NO_MORE_CANDIDATES)
		self.service_request.refresh_from_db()
		self.assertEqual(self.service_request.status, ServiceRequest.STATUS_PENDING)

	def test_late_response_on_matched_request_changes_nothing(self):
		winner = make_match(self.service_request, self.near, status=Match.STATUS_ACCEPTED)
		late = make_match(self.service_request, self.mid)
		self.service_request.status = ServiceRequest.STATUS_MATCHED
		self.service_request.save(update_fields=['status'])

		for decision in ('accept', 'reject'):
			result = respond_to_match(late.id, decision)
			self.assertEqual(result.outcome, ALREADY_FINALIZED)
			self.assertEqual(result.message, 'This request is already closed.')

		late.refresh_from_db()
		winner.refresh_from_db()
		self.assertEqual(late.status, Match.STATUS_WAITING)
		self.assertIsNone(late.responded_at)
		self.assertEqual(winner.status, Match.STATUS_ACCEPTED)
		self.assertEqual(self.service_request.matches.count(), 2)

	def test_response_after_expiry_is_refused(self):
		match = make_match(self.service_request, self.near, expires_in=timedelta(seconds=-1))

		result = respond_to_match(match.id, 'accept')

		self.assertEqual(result.outcome, EXPIRED)
		self.assertEqual(result.message, 'This link has expired.')
		self.service_request.refresh_from_db()
		self.assertEqual(self.service_request.status, ServiceRequest.STATUS_PENDING)

	def test_response_to_already_expired_match_is_refused(self):
		match = make_match(self.service_request, self.near, status=Match.STATUS_EXPIRED)

		result = respond_to_match(match.id, 'reject')

		self.assertEqual(result.outcome, EXPIRED)
		self.assertFalse(self.service_request.matches.filter(professional=self.mid).exists())

	def test_unknown_match_is_not_found(self):
		result = respond_to_match(uuid.uuid4(), 'accept')
		self.assertEqual(result.outcome, NOT_FOUND)
		self.assertFalse(result.ok)

	def test_invalid_decision_raises(self):
		match = make_match(self.service_request, self.near)
		with self.assertRaises(ValueError):
			respond_to_match(match.id, 'maybe')

	def test_two_accepts_for_same_request_produce_one_match(self):
		first = make_match(self.service_request, self.near)
		second = make_match(self.service_request, self.mid)

		results = [respond_to_match(first.id, 'accept'), respond_to_match(second.id, 'accept')]

		self.assertEqual([r.outcome for r in results], [MATCHED, ALREADY_FINALIZED])
		self.assertEqual(self.service_request.matches.filter(status=Match.STATUS_ACCEPTED).count(), 1)
		second.refresh_from_db()
		self.assertEqual(second.status, Match.STATUS_EXPIRED)

	def test_database_refuses_second_accepted_match(self):
		make_match(self.service_request, self.near, status=Match.STATUS_ACCEPTED)
		other = make_match(self.service_request, self.mid)

		with self.assertRaises(IntegrityError):
			with transaction.atomic():
				Match.objects.filter(pk=other.pk).update(status=Match.STATUS_ACCEPTED)


class ResponseRaceTests(MatchingTestCase):
	"""State changes landing between the early checks and the guarded updates."""

	def at_response_clock(self, action):
		# respond_to_match reads the clock once, right after its early checks
		real_now = timezone.now
		fired = []

		def now():
			if not fired:
				fired.append(True)
				action()
			return real_now()

		return patch('services.request_management.offer_response.timezone.now', side_effect=now)

	def close_request(self):
		ServiceRequest.objects.filter(pk=self.service_request.pk).update(status=ServiceRequest.STATUS_MATCHED)

	def test_accept_loses_to_sibling_accepted_in_between(self):
		first = make_match(self.service_request, self.near)
		second = make_match(self.service_request, self.mid)

		def sibling_accepts():
			Match.objects.filter(pk=first.pk).update(status=Match.STATUS_ACCEPTED)
			self.close_request()

		with self.at_response_clock(sibling_accepts):
			result = respond_to_match(second.id, 'accept')

		self.assertEqual(result.outcome, ALREADY_FINALIZED)
		accepted = self.service_request.matches.filter(status=Match.STATUS_ACCEPTED)
		self.assertEqual(list(accepted), [first])
		second.refresh_from_db()
		self.assertEqual(second.status, Match.STATUS_WAITING)
		self.assertIsNone(second.responded_at)

	def test_accept_rolls_back_when_request_closes_in_between(self):
		match = make_match(self.service_request, self.near)

		with self.at_response_clock(self.close_request):
			result = respond_to_match(match.id, 'accept')

		self.assertEqual(result.outcome, ALREADY_FINALIZED)
		match.refresh_from_db()
		self.assertEqual(match.status, Match.STATUS_WAITING)
		self.assertFalse(self.service_request.matches.filter(status=Match.STATUS_ACCEPTED).exists())

	def test_accept_of_offer_swept_in_between_is_expired(self):
		match = make_match(self.service_request, self.near)

		def sweep_target():
			Match.objects.filter(pk=match.pk).update(status=Match.STATUS_EXPIRED)

		with self.at_response_clock(sweep_target):
			result = respond_to_match(match.id, 'accept')

		self.assertEqual(result.outcome, EXPIRED)
		self.service_request.refresh_from_db()
		self.assertEqual(self.service_request.status, ServiceRequest.STATUS_PENDING)
		match.refresh_from_db()
		self.assertEqual(match.status, Match.STATUS_EXPIRED)

	def test_reject_of_offer_swept_in_between_offers_nobody(self):
		match = make_match(self.service_request, self.near)

		def sweep_target():
			Match.objects.filter(pk=match.pk).update(status=Match.STATUS_EXPIRED)

		with self.at_response_clock(sweep_target):
			result = respond_to_match(match.id, 'reject')

		self.assertEqual(result.outcome, EXPIRED)
		self.assertIsNone(result.next_outcome)
		match.refresh_from_db()
		self.assertEqual(match.status, Match.STATUS_EXPIRED)
		self.assertEqual(self.service_request.matches.count(), 1)
		self.notify.assert_not_called()

	def test_reject_after_request_closes_in_between_is_already_finalized(self):
		match = make_match(self.service_request, self.near)

		def accepted_elsewhere():
			Match.objects.filter(pk=match.pk).update(status=Match.STATUS_EXPIRED)
			self.close_request()

		with self.at_response_clock(accepted_elsewhere):
			result = respond_to_match(match.id, 'reject')

		self.assertEqual(result.outcome, ALREADY_FINALIZED)
		self.assertEqual(self.service_request.matches.count(), 1)


class SweepTests(MatchingTestCase):
	def test_sweep_expires_overdue_offer_and_offers_next(self):
		overdue = make_match(self.service_request, self.near, expires_in=timedelta(minutes=-1))

		result = sweep_expired()

		self.assertEqual((result.expired, result.advanced, result.exhausted), (1, 1, 0))
		overdue.refresh_from_db()
		self.assertEqual(overdue.status, Match.STATUS_EXPIRED)
		self.assertEqual(
			self.service_request.matches.get(status=Match.STATUS_WAITING).professional,
			self.mid
		)

	def test_sweep_leaves_request_pending_when_candidates_run_out(self):
		make_match(self.service_request, self.mid, status=Match.STATUS_REJECTED)
		make_match(self.service_request, self.near, expires_in=timedelta(minutes=-1))

		result = sweep_expired()

		self.assertEqual((result.expired, result.advanced, result.exhausted), (1, 0, 1))
		self.service_request.refresh_from_db()
		self.assertEqual(self.service_request.status, ServiceRequest.STATUS_PENDING)
		self.assertFalse(self.service_request.matches.filter(status=Match.STATUS_WAITING).exists())

	def test_second_sweep_changes_nothing(self):
		make_match(self.service_request, self.near, expires_in=timedelta(minutes=-1))
		sweep_expired()
		snapshot = list(Match.objects.order_by('id').values_list('id', 'status'))

		result = sweep_expired()

		self.assertEqual((result.expired, result.advanced, result.exhausted), (0, 0, 0))
		self.assertEqual(list(Match.objects.order_by('id').values_list('id', 'status')), snapshot)

	def test_sweep_ignores_offers_still_in_window(self):
		match = make_match(self.service_request, self.near)

		result = sweep_expired()

		self.assertEqual(result.expired, 0)
		match.refresh_from_db()
		self.assertEqual(match.status, Match.STATUS_WAITING)

	def test_sweep_does_not_advance_matched_requests(self):
		make_match(self.service_request, self.mid, status=Match.STATUS_ACCEPTED)
		make_match(self.service_request, self.near, expires_in=timedelta(minutes=-1))
		self.service_request.status = ServiceRequest.STATUS_MATCHED
		self.service_request.save(update_fields=['status'])

		result = sweep_expired()

		self.assertEqual((result.expired, result.advanced), (1, 0))
		self.assertEqual(self.service_request.matches.count(), 2)

	def test_sweep_advances_each_request_once(self):
		other_request = make_request(client_email='taro@example.com')
		make_match(self.service_request, self.near, expires_in=timedelta(minutes=-2))
		make_match(other_request, self.near, expires_in=timedelta(minutes=-1))

		result = sweep_expired()

		self.assertEqual((result.expired, result.advanced), (2, 2))
		self.assertEqual(self.service_request.matches.count(), 2)
		self.assertEqual(other_request.matches.count(), 2)

	@patch('services.matching.offer_expiry.advance')
	def test_one_failing_request_does_not_stop_the_sweep(self, mock_advance):
		broken = make_request(client_email='broken@example.com')
		make_match(broken, self.near, expires_in=timedelta(minutes=-2))
		make_match(self.service_request, self.near, expires_in=timedelta(minutes=-1))

		def fake_advance(request_id):
			if request_id == broken.id:
				raise RuntimeError('boom')
			return AdvanceResult(outcome=OFFERED, request_id=request_id)

		mock_advance.side_effect = fake_advance

		result = sweep_expired()

		self.assertEqual((result.expired, result.advanced, result.failed), (2, 1, 1))
		self.assertEqual(mock_advance.call_count, 2)

	def test_sweep_command_expires_and_advances(self):
		overdue = make_match(self.service_request, self.near, expires_in=timedelta(minutes=-1))

		call_command('sweep_expired_matches')

		overdue.refresh_from_db()
		self.assertEqual(overdue.status, Match.STATUS_EXPIRED)
		self.assertTrue(self.service_request.matches.filter(professional=self.mid).exists())

	@patch('service_requests.tasks.close_old_connections')
	def test_sweep_task_reports_counts(self, mock_close):
		make_match(self.service_request, self.near, expires_in=timedelta(minutes=-1))

		counts = sweep_expired_matches_task()

		self.assertEqual(counts, {'expired': 1, 'advanced': 1, 'exhausted': 0, 'failed': 0})
		mock_close.assert_called_once()


class PlanTitleTests(TestCase):
	def test_extracts_title_from_note(self):
		note = 'Please bring a tripod\n[サービス] Real estate photos (20 cuts)\nThanks'
		self.assertEqual(extract_plan_title(note), 'Real estate photos (20 cuts)')

	def test_missing_title(self):
		self.assertIsNone(extract_plan_title(''))
		self.assertIsNone(extract_plan_title(None))
		self.assertIsNone(extract_plan_title('no plan line here'))


@override_settings(INTERNAL_API_TOKEN='internal-secret')
class RequestApiTests(MatchingTestCase):
	def setUp(self):
		super().setUp()
		# Keep "newest first" assertions independent of clock resolution
		ServiceRequest.objects.filter(pk=self.service_request.pk).update(
			created_at=timezone.now() - timedelta(hours=1)
		)
		self.client = APIClient()
		self.factory = APIRequestFactory()

	@patch('services.request_management.request_intake.geocode_address', return_value=ORIGIN)
	def test_create_request_geocodes_persists_and_offers(self, mock_geocode):
		response = self.client.post('/api/requests/create/', {
			'client_name': 'Taro',
			'client_email': 'taro@example.com',
			'address': 'Tokyo, Shibuya',
			'note': '[サービス] Cleaning 2h',
		}, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertTrue(response.data['ok'])
		self.assertEqual(response.data['request']['status'], 'pending')
		self.assertEqual(response.data['request']['plan_title'], 'Cleaning 2h')
		self.assertEqual(response.data['match']['outcome'], OFFERED)
		mock_geocode.assert_called_once_with('Tokyo, Shibuya')

		created = ServiceRequest.objects.get(client_email='taro@example.com')
		self.assertEqual(created.matches.get().professional, self.near)

	@patch('services.request_management.request_intake.geocode_address',
		   side_effect=GeocodingError('geocoding failed: ZERO_RESULTS', provider_status='ZERO_RESULTS'))
	def test_create_request_with_unresolvable_address_persists_nothing(self, mock_geocode):
		response = self.client.post('/api/requests/create/', {
			'client_name': 'Taro',
			'client_email': 'taro@example.com',
			'address': 'nowhere',
		}, format='json')

		self.assertEqual(response.status_code, 502)
		self.assertEqual(response.data['provider_status'], 'ZERO_RESULTS')
		self.assertFalse(ServiceRequest.objects.filter(client_email='taro@example.com').exists())

	@patch('services.request_management.request_intake.advance', side_effect=RuntimeError('db hiccup'))
	@patch('services.request_management.request_intake.geocode_address', return_value=ORIGIN)
	def test_create_request_survives_failed_first_advance(self, mock_geocode, mock_advance):
		response = self.client.post('/api/requests/create/', {
			'client_name': 'Taro',
			'client_email': 'taro@example.com',
			'address': 'Tokyo, Shibuya',
		}, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertIsNone(response.data['match'])
		self.assertTrue(ServiceRequest.objects.filter(client_email='taro@example.com').exists())

	def test_create_request_requires_name_email_address(self):
		response = self.client.post('/api/requests/create/', {'client_email': 'not-an-email'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertFalse(response.data['ok'])
		for field in ('client_name', 'client_email', 'address'):
			self.assertIn(field, response.data['details'])

	def test_respond_link_returns_plain_text(self):
		match = make_match(self.service_request, self.near)

		response = self.client.get('/api/match/respond/', {'id': str(match.id), 'status': 'accept'})

		self.assertEqual(response.status_code, 200)
		self.assertTrue(response['Content-Type'].startswith('text/plain'))
		self.assertEqual(response.content.decode(), 'Thank you. The match is confirmed.')

	def test_respond_returns_json_when_asked(self):
		match = make_match(self.service_request, self.near)

		request = self.factory.get(
			'/api/match/respond/',
			{'id': str(match.id), 'status': 'reject'},
			HTTP_ACCEPT='application/json'
		)
		response = respond(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['outcome'], REJECTED)
		self.assertEqual(response.data['next_outcome'], OFFERED)

	def test_respond_with_bad_parameters(self):
		response = self.client.get('/api/match/respond/', {'id': 'nope', 'status': 'accept'})
		self.assertEqual(response.status_code, 400)

		response = self.client.get('/api/match/respond/', {'id': str(uuid.uuid4()), 'status': 'later'})
		self.assertEqual(response.status_code, 400)

	def test_respond_to_unknown_match(self):
		response = self.client.get('/api/match/respond/', {'id': str(uuid.uuid4()), 'status': 'accept'})

		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.content.decode(), 'This offer could not be found.')

	def test_match_next_requires_internal_token(self):
		response = self.client.post('/api/match/next/', {'request_id': str(self.service_request.id)}, format='json')
		self.assertEqual(response.status_code, 403)

		response = self.client.post(
			'/api/match/next/',
			{'request_id': str(self.service_request.id)},
			format='json',
			HTTP_X_INTERNAL_TOKEN='wrong'
		)
		self.assertEqual(response.status_code, 403)

	def test_match_next_offers_with_token(self):
		response = self.client.post(
			'/api/match/next/',
			{'request_id': str(self.service_request.id), 'radius_km': 50},
			format='json',
			HTTP_X_INTERNAL_TOKEN='internal-secret'
		)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['outcome'], OFFERED)
		match = Match.objects.get(pk=response.data['match_id'])
		self.assertEqual(match.professional, self.near)

	def test_match_next_rejects_non_positive_radius(self):
		response = self.client.post(
			'/api/match/next/',
			{'request_id': str(self.service_request.id), 'radius_km': 0},
			format='json',
			HTTP_X_INTERNAL_TOKEN='internal-secret'
		)
		self.assertEqual(response.status_code, 400)

	def test_check_expired_endpoint(self):
		make_match(self.service_request, self.near, expires_in=timedelta(minutes=-1))

		response = self.client.post('/api/match/check-expired/', HTTP_X_INTERNAL_TOKEN='internal-secret')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['expired'], 1)
		self.assertEqual(response.data['advanced'], 1)

	def test_my_requests_lists_newest_first_for_email(self):
		newer = make_request(client_email='Hanako@Example.com', note='[サービス] Cleaning 2h')
		make_request(client_email='someone@example.com')

		response = self.client.get('/api/my-requests/', {'client_email': '  HANAKO@example.com '})

		self.assertEqual(response.status_code, 200)
		ids = [item['id'] for item in response.data['items']]
		self.assertEqual(ids, [str(newer.id), str(self.service_request.id)])
		self.assertEqual(response.data['items'][0]['plan_title'], 'Cleaning 2h')
		self.assertEqual(response.data['items'][0]['status'], 'pending')

	def test_my_requests_detail_checks_owner(self):
		response = self.client.get('/api/my-requests/', {
			'client_email': 'hanako@example.com',
			'id': str(self.service_request.id),
		})
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['request']['address'], 'Tokyo, Shibuya')

		response = self.client.get('/api/my-requests/', {
			'client_email': 'mallory@example.com',
			'id': str(self.service_request.id),
		})
		self.assertEqual(response.status_code, 403)

		response = self.client.get('/api/my-requests/', {
			'client_email': 'hanako@example.com',
			'id': str(uuid.uuid4()),
		})
		self.assertEqual(response.status_code, 404)

	def test_my_requests_requires_email(self):
		response = self.client.get('/api/my-requests/')
		self.assertEqual(response.status_code, 400)

	def test_admin_request_list_is_paged_and_staff_only(self):
		make_request(client_email='second@example.com')
		make_match(self.service_request, self.near, status=Match.STATUS_ACCEPTED)
		staff = User.objects.create_user(username='staff', password='staff1234', is_staff=True)
		customer = User.objects.create_user(username='customer', password='customer1234')

		request = self.factory.get('/api/admin/requests/', {'limit': 1, 'offset': 1})
		force_authenticate(request, user=staff)
		response = AdminRequestListView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['count'], 2)
		self.assertEqual(len(response.data['results']), 1)
		oldest = response.data['results'][0]
		self.assertEqual(oldest['id'], str(self.service_request.id))
		self.assertEqual(oldest['client_email'], 'hanako@example.com')
		self.assertEqual(oldest['matched_professional']['id'], self.near.id)
		self.assertEqual(len(oldest['matches']), 1)
		self.assertEqual(oldest['matches'][0]['status'], Match.STATUS_ACCEPTED)
		self.assertEqual(oldest['matches'][0]['professional']['id'], self.near.id)

		request = self.factory.get('/api/admin/requests/')
		force_authenticate(request, user=customer)
		response = AdminRequestListView.as_view()(request)
		self.assertEqual(response.status_code, 403)
