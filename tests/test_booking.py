"""
Tests for booking CRUD and lifecycle operations.
"""

import pytest


class TestCreateBooking:
    """Tests for create_booking."""

    def test_notional_value_from_rate(self, app, inventory, make_booking):
        """5 days at 1000/day is 5000.00."""
        with app.app_context():
            from models.booking import get_booking_by_id

            result = make_booking('2024-06-01', '2024-06-05')
            booking = get_booking_by_id(result['id'])

            assert result['notional_value'] == '5000.00'
            assert booking['notional_value'] == '5000.00'
            assert booking['status'] == 'created'
            assert booking['slot_number'] is None
            assert booking['customer_name'] == 'Acme Beverages'
            assert booking['billboard_code'] == 'BB-STA-T01'
            assert booking['reference_code'].startswith('BK-')

    def test_single_day_booking(self, app, inventory, make_booking):
        with app.app_context():
            result = make_booking('2024-06-01', '2024-06-01')
            assert result['notional_value'] == '1000.00'

    def test_explicit_notional_value(self, app, inventory, make_booking):
        with app.app_context():
            result = make_booking('2024-06-01', '2024-06-05', notional_value='4250.5')
            assert result['notional_value'] == '4250.50'

    def test_conflict_lists_existing_code(self, app, inventory, make_booking):
        with app.app_context():
            from models.errors import ConflictError

            first = make_booking('2024-07-01', '2024-07-10')

            with pytest.raises(ConflictError) as exc_info:
                make_booking('2024-07-05', '2024-07-08')

            assert exc_info.value.conflicts == [first['reference_code']]
            assert first['reference_code'] in exc_info.value.message
            assert exc_info.value.status_code == 409

    def test_conflict_does_not_consume_reference(self, app, inventory, make_booking):
        with app.app_context():
            from models.errors import ConflictError

            first = make_booking('2024-07-01', '2024-07-10')
            with pytest.raises(ConflictError):
                make_booking('2024-07-05', '2024-07-08')
            second = make_booking('2024-07-11', '2024-07-12')

            assert int(second['reference_code'][-4:]) == int(first['reference_code'][-4:]) + 1

    def test_missing_fields(self, app, inventory):
        with app.app_context():
            from models.booking import create_booking
            from models.errors import ValidationError

            with pytest.raises(ValidationError) as exc_info:
                create_booking({'customer_id': inventory['customer_id']})
            assert 'billboard_id' in exc_info.value.message

    def test_end_before_start(self, app, inventory, make_booking):
        with app.app_context():
            from models.errors import InvalidStateError

            with pytest.raises(InvalidStateError):
                make_booking('2024-07-10', '2024-07-01')

    def test_unknown_customer_and_billboard(self, app, inventory):
        with app.app_context():
            from models.booking import create_booking
            from models.errors import NotFoundError

            with pytest.raises(NotFoundError):
                create_booking({'customer_id': 999, 'billboard_id': inventory['static_id'],
                                'start_date': '2024-07-01', 'end_date': '2024-07-02'})
            with pytest.raises(NotFoundError):
                create_booking({'customer_id': inventory['customer_id'], 'billboard_id': 999,
                                'start_date': '2024-07-01', 'end_date': '2024-07-02'})

    def test_slot_out_of_range(self, app, inventory, make_booking):
        with app.app_context():
            from models.errors import ValidationError

            with pytest.raises(ValidationError):
                make_booking('2024-07-01', '2024-07-02',
                             billboard_id=inventory['digital_id'], slot_number=4)
            with pytest.raises(ValidationError):
                make_booking('2024-07-01', '2024-07-02',
                             billboard_id=inventory['digital_id'], slot_number=0)

    def test_static_slot_dropped(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import get_booking_by_id

            result = make_booking('2024-07-01', '2024-07-02', slot_number=2)
            assert get_booking_by_id(result['id'])['slot_number'] is None


class TestQueries:
    """Lookup and listing."""

    def test_get_by_reference(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import get_booking_by_reference

            result = make_booking('2024-07-01', '2024-07-02')
            assert get_booking_by_reference(result['reference_code'])['id'] == result['id']
            assert get_booking_by_reference('BK-1999-0001') is None

    def test_filtered_pagination(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import get_bookings_filtered

            for day in range(1, 6):
                make_booking(f'2024-07-{day:02d}', f'2024-07-{day:02d}')
            make_booking('2024-07-01', '2024-07-01',
                         billboard_id=inventory['digital_id'], slot_number=1)

            page = get_bookings_filtered(billboard_id=inventory['static_id'],
                                         sort_by='start_date', sort_order='asc',
                                         page=2, per_page=2)
            assert page['total'] == 5
            assert page['pages'] == 3
            assert [b['start_date'] for b in page['items']] == ['2024-07-03', '2024-07-04']

            ranged = get_bookings_filtered(start_date_from='2024-07-04',
                                           start_date_to='2024-07-05')
            assert ranged['total'] == 2


class TestUpdateBooking:
    """Tests for update_booking."""

    def test_partial_update(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import get_booking_by_id, update_booking

            result = make_booking('2024-07-01', '2024-07-05', notes='Initial')
            assert update_booking(result['id'], {'creative_ref': 'CR-77'}, updated_by='ops')

            booking = get_booking_by_id(result['id'])
            assert booking['creative_ref'] == 'CR-77'
            assert booking['notes'] == 'Initial'
            assert booking['start_date'] == '2024-07-01'
            assert booking['updated_by'] == 'ops'

    def test_empty_update(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import update_booking

            result = make_booking('2024-07-01', '2024-07-05')
            assert update_booking(result['id'], {'unknown': 1}) is False

    def test_move_dates_rechecks_availability(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import get_booking_by_id, update_booking
            from models.errors import ConflictError

            first = make_booking('2024-07-01', '2024-07-05')
            second = make_booking('2024-07-10', '2024-07-15')

            # Overlapping only itself is fine
            update_booking(second['id'], {'start_date': '2024-07-08'})
            assert get_booking_by_id(second['id'])['start_date'] == '2024-07-08'

            with pytest.raises(ConflictError) as exc_info:
                update_booking(second['id'], {'start_date': '2024-07-05'})
            assert exc_info.value.conflicts == [first['reference_code']]
            assert get_booking_by_id(second['id'])['start_date'] == '2024-07-08'

    def test_move_to_taken_slot(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import update_booking
            from models.errors import ConflictError

            make_booking('2024-07-01', '2024-07-05',
                         billboard_id=inventory['digital_id'], slot_number=1)
            other = make_booking('2024-07-01', '2024-07-05',
                                 billboard_id=inventory['digital_id'], slot_number=2)

            with pytest.raises(ConflictError):
                update_booking(other['id'], {'slot_number': 1})

    @pytest.mark.parametrize('status', ['completed', 'po_generated', 'invoiced'])
    def test_finalized_rejected(self, app, inventory, make_booking, status):
        with app.app_context():
            from models.booking import update_booking, update_booking_status
            from models.errors import InvalidStateError

            result = make_booking('2024-07-01', '2024-07-05')
            update_booking_status(result['id'], status)

            with pytest.raises(InvalidStateError):
                update_booking(result['id'], {'notes': 'late edit'})
            with pytest.raises(InvalidStateError):
                update_booking(result['id'], {})

    def test_invalid_status_value(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import update_booking
            from models.errors import ValidationError

            result = make_booking('2024-07-01', '2024-07-05')
            with pytest.raises(ValidationError):
                update_booking(result['id'], {'status': 'archived'})

    def test_not_found(self, app, inventory):
        with app.app_context():
            from models.booking import update_booking
            from models.errors import NotFoundError

            with pytest.raises(NotFoundError):
                update_booking(999, {'notes': 'x'})


class TestDeleteBooking:
    """Tests for delete_booking."""

    def test_delete_created(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import delete_booking, get_booking_by_id

            result = make_booking('2024-07-01', '2024-07-05')
            assert delete_booking(result['id']) is True
            assert get_booking_by_id(result['id']) is None

    def test_delete_requires_created(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import delete_booking, update_booking_status
            from models.errors import InvalidStateError

            result = make_booking('2024-07-01', '2024-07-05')
            update_booking_status(result['id'], 'confirmed')

            with pytest.raises(InvalidStateError):
                delete_booking(result['id'])

    def test_delete_missing(self, app, inventory):
        with app.app_context():
            from models.booking import delete_booking
            from models.errors import NotFoundError

            with pytest.raises(NotFoundError):
                delete_booking(999)


class TestStatusChanges:
    """Tests for update_booking_status."""

    def test_any_jump_allowed_by_default(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import update_booking_status

            result = make_booking('2024-07-01', '2024-07-05')
            change = update_booking_status(result['id'], 'invoiced')
            assert change['previous_status'] == 'created'
            assert change['status'] == 'invoiced'

            back = update_booking_status(result['id'], 'created')
            assert back['previous_status'] == 'invoiced'

    def test_enforced_transitions(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import update_booking_status
            from models.errors import InvalidStateError

            app.config['ENFORCE_STATUS_TRANSITIONS'] = True
            result = make_booking('2024-07-01', '2024-07-05')

            update_booking_status(result['id'], 'confirmed')
            with pytest.raises(InvalidStateError):
                update_booking_status(result['id'], 'invoiced')

    def test_unknown_status(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import update_booking_status
            from models.errors import ValidationError

            result = make_booking('2024-07-01', '2024-07-05')
            with pytest.raises(ValidationError):
                update_booking_status(result['id'], 'cancelled')
            with pytest.raises(ValidationError):
                update_booking_status(result['id'], 'done')

    def test_missing_booking(self, app, inventory):
        with app.app_context():
            from models.booking import update_booking_status
            from models.errors import NotFoundError

            with pytest.raises(NotFoundError):
                update_booking_status(999, 'confirmed')


class TestShortClose:
    """Tests for short_close_booking."""

    def test_short_close(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import get_booking_by_id, short_close_booking

            result = make_booking('2024-07-01', '2024-07-10', notes='Launch flight')
            short_close_booking(result['id'], '2024-07-07', 'Client request')

            booking = get_booking_by_id(result['id'])
            assert booking['status'] == 'completed'
            assert booking['actual_end_date'] == '2024-07-07'
            assert booking['end_date'] == '2024-07-10'
            assert booking['notes'] == 'Launch flight\n\nShort Closed: Client request'

    def test_same_as_end_date_fails(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import short_close_booking
            from models.errors import InvalidStateError

            result = make_booking('2024-07-01', '2024-07-10')
            with pytest.raises(InvalidStateError):
                short_close_booking(result['id'], '2024-07-10', 'No change')
            with pytest.raises(InvalidStateError):
                short_close_booking(result['id'], '2024-07-12', 'Extension')

    def test_before_start_fails(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import short_close_booking
            from models.errors import InvalidStateError

            result = make_booking('2024-07-01', '2024-07-10')
            with pytest.raises(InvalidStateError):
                short_close_booking(result['id'], '2024-06-30', 'Too early')

    def test_start_date_allowed(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import get_booking_by_id, short_close_booking

            result = make_booking('2024-07-01', '2024-07-10')
            short_close_booking(result['id'], '2024-07-01', 'Pulled on day one')
            assert get_booking_by_id(result['id'])['actual_end_date'] == '2024-07-01'

    def test_status_gate(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import short_close_booking, update_booking_status
            from models.errors import InvalidStateError

            result = make_booking('2024-07-01', '2024-07-10')
            update_booking_status(result['id'], 'completed')
            with pytest.raises(InvalidStateError):
                short_close_booking(result['id'], '2024-07-05', 'Too late')


class TestCancel:
    """Tests for cancel_booking."""

    def test_cancel_releases_dates(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import cancel_booking, get_booking_by_id, update_booking
            from models.errors import InvalidStateError

            first = make_booking('2024-07-01', '2024-07-10')
            cancel_booking(first['id'], 'Budget cut')

            booking = get_booking_by_id(first['id'])
            assert booking['status'] == 'cancelled'
            assert booking['notes'] == 'Cancelled: Budget cut'

            # Same dates can be booked again and the cancelled booking is frozen
            make_booking('2024-07-01', '2024-07-10')
            with pytest.raises(InvalidStateError):
                update_booking(first['id'], {'notes': 'reopen'})

    def test_cancel_not_allowed_after_completion(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import cancel_booking, update_booking_status
            from models.errors import InvalidStateError

            result = make_booking('2024-07-01', '2024-07-10')
            update_booking_status(result['id'], 'po_generated')
            with pytest.raises(InvalidStateError):
                cancel_booking(result['id'])

    def test_revive_cancelled_when_dates_taken(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import (
                cancel_booking, check_availability, get_booking_by_id, update_booking_status
            )
            from models.errors import ConflictError

            first = make_booking('2024-07-01', '2024-07-10')
            cancel_booking(first['id'], 'Budget cut')
            second = make_booking('2024-07-01', '2024-07-10')

            with pytest.raises(ConflictError) as exc_info:
                update_booking_status(first['id'], 'created')
            assert exc_info.value.conflicts == [second['reference_code']]
            assert get_booking_by_id(first['id'])['status'] == 'cancelled'

            availability = check_availability(inventory['static_id'], '2024-07-01', '2024-07-10')
            assert [c['reference_code'] for c in availability['conflicts']] == [second['reference_code']]

    def test_revive_cancelled_when_dates_free(self, app, inventory, make_booking):
        with app.app_context():
            from models.booking import cancel_booking, get_booking_by_id, update_booking_status

            first = make_booking('2024-07-01', '2024-07-10')
            cancel_booking(first['id'])
            make_booking('2024-07-11', '2024-07-12')

            result = update_booking_status(first['id'], 'confirmed')
            assert result['previous_status'] == 'cancelled'
            assert get_booking_by_id(first['id'])['status'] == 'confirmed'
