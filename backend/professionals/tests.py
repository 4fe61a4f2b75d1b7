from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIRequestFactory, force_authenticate

from common.utils import bounding_box, crosses_antimeridian, distance_km
from .models import PlanRequirement, Professional
from .services import find_nearby_professionals, required_labels_for, upsert_plan_requirement
from .views import PlanRequirementView

User = get_user_model()


class DirectoryTests(TestCase):
    def setUp(self):
        self.origin = (35.66, 139.70)
        self.close = Professional.objects.create(
            name='close', email='close@example.com', latitude=35.678, longitude=139.70, labels=['drone']
        )
        self.farther = Professional.objects.create(
            name='farther', email='farther@example.com', latitude=35.75, longitude=139.70
        )
        Professional.objects.create(
            name='outside', email='outside@example.com', latitude=36.38, longitude=139.70
        )
        Professional.objects.create(name='nowhere', email='nowhere@example.com')

    def test_candidates_are_ordered_by_distance_within_radius(self):
        candidates = find_nearby_professionals(*self.origin, radius_km=50)

        self.assertEqual([c.professional for c in candidates], [self.close, self.farther])
        self.assertLess(candidates[0].distance_km, candidates[1].distance_km)

    def test_small_radius_keeps_only_closest(self):
        candidates = find_nearby_professionals(*self.origin, radius_km=5)
        self.assertEqual([c.id for c in candidates], [self.close.id])

    def test_required_labels_filter(self):
        candidates = find_nearby_professionals(*self.origin, radius_km=50, required_labels=['drone'])
        self.assertEqual([c.id for c in candidates], [self.close.id])

        candidates = find_nearby_professionals(*self.origin, radius_km=50, required_labels=['drone', 'video'])
        self.assertEqual(candidates, [])

    def test_inactive_professionals_are_hidden(self):
        self.close.is_active = False
        self.close.save(update_fields=['is_active'])

        candidates = find_nearby_professionals(*self.origin, radius_km=50)

        self.assertEqual([c.id for c in candidates], [self.farther.id])

    def test_bounding_box_contains_radius(self):
        min_lat, max_lat, min_lng, max_lng = bounding_box(35.66, 139.70, 10)

        # Points 10km away along each axis must fall inside the box
        self.assertLessEqual(distance_km(35.66, 139.70, max_lat, 139.70), 10.2)
        self.assertGreaterEqual(distance_km(35.66, 139.70, max_lat, 139.70), 10)
        self.assertGreaterEqual(distance_km(35.66, 139.70, 35.66, max_lng), 10)
        self.assertLess(min_lat, 35.66)
        self.assertLess(min_lng, 139.70)

    def test_bounding_box_wraps_at_antimeridian(self):
        min_lat, max_lat, min_lng, max_lng = bounding_box(-17.8, 179.9, 50)

        self.assertTrue(crosses_antimeridian(min_lng, max_lng))
        self.assertGreater(min_lng, 179.0)
        self.assertLess(max_lng, -179.0)

    def test_candidates_found_across_antimeridian(self):
        # Fiji: one professional 5km away on this side of 180 degrees, one 21km away across it
        east = Professional.objects.create(
            name='east', email='east@example.com', latitude=-17.8, longitude=-179.9
        )
        west = Professional.objects.create(
            name='west', email='west@example.com', latitude=-17.8, longitude=179.95
        )

        candidates = find_nearby_professionals(-17.8, 179.9, radius_km=50)

        self.assertEqual([c.professional for c in candidates], [west, east])
        self.assertLess(candidates[1].distance_km, 25)


class PlanRequirementTests(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.staff = User.objects.create_user(username='staff', password='staff1234', is_staff=True)
        self.customer = User.objects.create_user(username='customer', password='customer1234')

    def test_required_labels_lookup(self):
        PlanRequirement.objects.create(service='photo', plan_key='photo-20', required_labels=['real_estate'])

        self.assertEqual(required_labels_for('photo', 'photo-20'), ['real_estate'])
        self.assertEqual(required_labels_for('photo', 'photo-50'), [])
        self.assertEqual(required_labels_for('', ''), [])

    def test_upsert_updates_existing_requirement(self):
        upsert_plan_requirement('cleaning', 'basic', ['cleaning'])
        upsert_plan_requirement('cleaning', 'basic', ['cleaning', 'aircon'])

        requirement = PlanRequirement.objects.get(service='cleaning', plan_key='basic')
        self.assertEqual(requirement.required_labels, ['cleaning', 'aircon'])
        self.assertEqual(PlanRequirement.objects.count(), 1)

    def test_view_lists_and_upserts_for_staff(self):
        request = self.factory.post('/api/admin/plan-requirements/', {
            'service': 'photo',
            'plan_key': 'photo-20',
            'required_labels': ['real_estate'],
        }, format='json')
        force_authenticate(request, user=self.staff)
        response = PlanRequirementView.as_view()(request)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {'ok': True})

        # Second post on the same key updates instead of failing uniqueness
        request = self.factory.post('/api/admin/plan-requirements/', {
            'service': 'photo',
            'plan_key': 'photo-20',
            'required_labels': ['real_estate', 'drone'],
        }, format='json')
        force_authenticate(request, user=self.staff)
        self.assertEqual(PlanRequirementView.as_view()(request).status_code, 200)

        request = self.factory.get('/api/admin/plan-requirements/')
        force_authenticate(request, user=self.staff)
        response = PlanRequirementView.as_view()(request)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['required_labels'], ['real_estate', 'drone'])

    def test_view_rejects_invalid_payload(self):
        request = self.factory.post('/api/admin/plan-requirements/', {'service': 'photo'}, format='json')
        force_authenticate(request, user=self.staff)
        response = PlanRequirementView.as_view()(request)

        self.assertEqual(response.status_code, 400)
        self.assertIn('plan_key', response.data['details'])

    def test_view_is_staff_only(self):
        request = self.factory.get('/api/admin/plan-requirements/')
        force_authenticate(request, user=self.customer)
        response = PlanRequirementView.as_view()(request)
        self.assertEqual(response.status_code, 403)
