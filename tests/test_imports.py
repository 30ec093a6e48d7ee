"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_schemas_package(self):
        from booking_engine.schemas import BookingStatus, CartItem, PaymentType, TimeSlot
        assert BookingStatus.UPCOMING == "upcoming"
        assert PaymentType.DEPOSIT == "deposit"
        assert TimeSlot(time="9:00 AM").is_booked is False
        assert CartItem(id="1", provider_name="KIKI", service_name="Nails").duration == "1 hour"


class TestSchedulingImports:
    def test_import_scheduling_package(self):
        from booking_engine.scheduling import (
            AvailabilityService, CartValidator, InMemoryBookingStore, get_provider_day_schedule,
        )
        assert callable(get_provider_day_schedule)
        service = AvailabilityService(InMemoryBookingStore())
        assert CartValidator(service).availability is service


class TestCheckoutImports:
    def test_import_checkout_package(self):
        from booking_engine.checkout import CheckoutService, calculate_service_charge
        assert callable(calculate_service_charge)
        assert CheckoutService is not None


class TestLifecycleImports:
    def test_import_lifecycle_package(self):
        from booking_engine.lifecycle import BookingManager, BookingStatusMachine, EventKind
        assert len(EventKind) == 5
        assert BookingStatusMachine().get_valid_triggers()
        assert BookingManager is not None


class TestTopLevel:
    def test_top_level_exports(self):
        import booking_engine
        for name in booking_engine.__all__:
            assert hasattr(booking_engine, name), name

    def test_import_config(self):
        from booking_engine.config import settings
        assert settings.app_name
        assert settings.payments.deposit_percentage > 0
