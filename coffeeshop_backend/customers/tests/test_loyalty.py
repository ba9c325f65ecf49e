# customers/tests/test_loyalty.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings

from customers.models import CustomerProfile
from customers.services.loyalty import (
    InsufficientPointsError,
    credit_points,
    get_balance,
    points_for_total,
    redeem_points,
    reverse_points,
)

User = get_user_model()


class PointsForTotalTests(SimpleTestCase):
    def test_one_point_per_ten(self):
        self.assertEqual(points_for_total(Decimal("240.00")), 24)
        self.assertEqual(points_for_total(Decimal("245.99")), 24)
        self.assertEqual(points_for_total(Decimal("9.99")), 0)
        self.assertEqual(points_for_total("100"), 10)

    def test_non_positive_total_earns_nothing(self):
        self.assertEqual(points_for_total(Decimal("0.00")), 0)
        self.assertEqual(points_for_total(None), 0)

    @override_settings(LOYALTY_POINTS_PER_UNIT=20)
    def test_rate_is_configurable(self):
        self.assertEqual(points_for_total(Decimal("240.00")), 12)


class LoyaltyLedgerTests(TestCase):
    """
    GUARANTEES:
    - Redemption requires a balance of at least 100 at write time
    - Reversals never go below zero
    """

    def setUp(self):
        self.user = User.objects.create_user(email="ana@example.com", password="pass")

    def test_credit_creates_profile_lazily(self):
        self.assertFalse(CustomerProfile.objects.filter(user=self.user).exists())

        balance = credit_points(user_id=self.user.id, points=24)

        self.assertEqual(balance, 24)
        self.assertEqual(get_balance(user_id=self.user.id), 24)

    def test_credit_zero_points_still_creates_profile(self):
        credit_points(user_id=self.user.id, points=0)
        self.assertTrue(CustomerProfile.objects.filter(user=self.user).exists())

    def test_credit_rejects_negative(self):
        with self.assertRaises(ValueError):
            credit_points(user_id=self.user.id, points=-1)

    def test_redeem_spends_cost_and_credits_earned(self):
        CustomerProfile.objects.create(user=self.user, points_balance=130)

        balance = redeem_points(user_id=self.user.id, earned=12)

        self.assertEqual(balance, 42)
        profile = CustomerProfile.objects.get(user=self.user)
        self.assertEqual(profile.points_used_lifetime, 100)

    def test_redeem_with_exact_balance(self):
        CustomerProfile.objects.create(user=self.user, points_balance=100)
        self.assertEqual(redeem_points(user_id=self.user.id, earned=0), 0)

    def test_redeem_below_threshold_is_rejected(self):
        CustomerProfile.objects.create(user=self.user, points_balance=99)

        with self.assertRaises(InsufficientPointsError):
            redeem_points(user_id=self.user.id, earned=50)

        profile = CustomerProfile.objects.get(user=self.user)
        self.assertEqual(profile.points_balance, 99)
        self.assertEqual(profile.points_used_lifetime, 0)

    def test_redeem_without_profile_is_rejected(self):
        with self.assertRaises(InsufficientPointsError):
            redeem_points(user_id=self.user.id, earned=0)

    def test_reverse_floors_at_zero(self):
        CustomerProfile.objects.create(
            user=self.user, points_balance=40, points_used_lifetime=100
        )

        self.assertTrue(reverse_points(user_id=self.user.id, balance_delta=-100, used_delta=100))

        profile = CustomerProfile.objects.get(user=self.user)
        self.assertEqual(profile.points_balance, 0)
        self.assertEqual(profile.points_used_lifetime, 0)

    def test_reverse_can_add_points_back(self):
        CustomerProfile.objects.create(
            user=self.user, points_balance=30, points_used_lifetime=100
        )

        reverse_points(user_id=self.user.id, balance_delta=76, used_delta=100)

        profile = CustomerProfile.objects.get(user=self.user)
        self.assertEqual(profile.points_balance, 106)
        self.assertEqual(profile.points_used_lifetime, 0)

    def test_reverse_without_profile_is_noop(self):
        self.assertFalse(reverse_points(user_id=self.user.id, balance_delta=-5, used_delta=0))
