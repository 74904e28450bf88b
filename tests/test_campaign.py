"""
Tests for campaign orchestration.
"""

import pytest

from database import get_db


def _count(table):
    cursor = get_db().cursor()
    cursor.execute(f'SELECT COUNT(*) as total FROM {table}')
    return cursor.fetchone()['total']


@pytest.fixture
def campaign_data(inventory):
    """Two-billboard campaign for 2024-09-01..2024-09-10."""
    return {
        'name': 'Monsoon Launch',
        'customer_id': inventory['customer_id'],
        'start_date': '2024-09-01',
        'end_date': '2024-09-10',
        'billboards': [
            {'billboard_id': inventory['static_id']},
            {'billboard_id': inventory['digital_id'], 'slot_number': 2},
        ],
    }


class TestCreateCampaign:
    """Tests for create_campaign."""

    def test_creates_bookings_and_totals(self, app, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign, get_campaign_by_id

            result = create_campaign(campaign_data, created_by='planner')

            assert result['reference_code'].startswith('CP-')
            assert len(result['bookings']) == 2
            # 10 days x (1000 + 400)
            assert result['total_value'] == '14000.00'

            campaign = get_campaign_by_id(result['id'])
            assert campaign['booking_count'] == 2
            assert campaign['start_date'] == '2024-09-01'
            assert campaign['end_date'] == '2024-09-10'
            assert campaign['customer_name'] == 'Acme Beverages'
            assert {b['notional_value'] for b in campaign['bookings']} == {'10000.00', '4000.00'}
            assert all(b['status'] == 'created' for b in campaign['bookings'])

    def test_conflict_rolls_back_everything(self, app, inventory, make_booking, campaign_data):
        """One taken billboard leaves no campaign and no new bookings behind."""
        with app.app_context():
            from models.campaign import create_campaign
            from models.errors import ConflictError
            from models.sequence import get_current_sequence

            blocker = make_booking('2024-09-05', '2024-09-06',
                                   billboard_id=inventory['digital_id'], slot_number=2)

            with pytest.raises(ConflictError) as exc_info:
                create_campaign(campaign_data)

            assert exc_info.value.conflicts == [blocker['reference_code']]
            assert 'Central Mall LED' in exc_info.value.message
            assert _count('campaigns') == 0
            assert _count('bookings') == 1
            assert get_current_sequence('campaign') == 0
            assert get_current_sequence('booking') == 1

    def test_duplicate_selection_conflicts(self, app, inventory, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign
            from models.errors import ConflictError

            campaign_data['billboards'] = [
                {'billboard_id': inventory['static_id']},
                {'billboard_id': inventory['static_id']},
            ]

            with pytest.raises(ConflictError):
                create_campaign(campaign_data)
            assert _count('campaigns') == 0
            assert _count('bookings') == 0

    def test_requires_billboards_and_dates(self, app, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign
            from models.errors import ValidationError

            with pytest.raises(ValidationError):
                create_campaign({**campaign_data, 'billboards': []})
            with pytest.raises(ValidationError):
                create_campaign({**campaign_data, 'end_date': None})

    def test_selection_without_billboard(self, app, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign
            from models.errors import ValidationError

            campaign_data['billboards'].append({'slot_number': 1})
            with pytest.raises(ValidationError) as exc_info:
                create_campaign(campaign_data)
            assert exc_info.value.message == 'billboard_id is required for each selection'
            assert _count('campaigns') == 0

    def test_unknown_billboard(self, app, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign
            from models.errors import NotFoundError

            campaign_data['billboards'].append({'billboard_id': 999})
            with pytest.raises(NotFoundError):
                create_campaign(campaign_data)
            assert _count('bookings') == 0

    def test_reversed_dates(self, app, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign
            from models.errors import InvalidStateError

            with pytest.raises(InvalidStateError):
                create_campaign({**campaign_data, 'start_date': '2024-09-11'})


class TestMembership:
    """Adding and removing bookings."""

    def test_add_and_remove_recompute_totals(self, app, inventory, make_booking, campaign_data):
        with app.app_context():
            from models.campaign import (
                add_booking_to_campaign, create_campaign, remove_booking_from_campaign
            )

            campaign = create_campaign(campaign_data)
            extra = make_booking('2024-08-20', '2024-08-21')

            totals = add_booking_to_campaign(campaign['id'], extra['id'])
            assert totals['total_value'] == '16000.00'
            assert totals['start_date'] == '2024-08-20'
            assert totals['booking_count'] == 3

            totals = remove_booking_from_campaign(campaign['id'], extra['id'])
            assert totals['total_value'] == '14000.00'
            assert totals['start_date'] == '2024-09-01'

    def test_move_between_campaigns(self, app, inventory, make_booking, campaign_data):
        with app.app_context():
            from models.campaign import (
                add_booking_to_campaign, create_campaign, get_campaign_by_id
            )

            first = create_campaign(campaign_data)
            second = create_campaign({
                **campaign_data,
                'name': 'Second Wave',
                'start_date': '2024-10-01',
                'end_date': '2024-10-02',
                'billboards': [{'billboard_id': inventory['static_id']}],
            })

            moved = first['bookings'][0]['id']
            add_booking_to_campaign(second['id'], moved)

            assert get_campaign_by_id(first['id'])['total_value'] == '4000.00'
            assert get_campaign_by_id(second['id'])['total_value'] == '12000.00'

    def test_customer_must_match(self, app, inventory, campaign_data):
        with app.app_context():
            from models.booking import create_booking
            from models.campaign import add_booking_to_campaign, create_campaign
            from models.errors import InvalidStateError

            campaign = create_campaign(campaign_data)
            foreign = create_booking({
                'customer_id': inventory['other_customer_id'],
                'billboard_id': inventory['static_id'],
                'start_date': '2024-11-01',
                'end_date': '2024-11-02',
            })

            with pytest.raises(InvalidStateError):
                add_booking_to_campaign(campaign['id'], foreign['id'])

    def test_create_booking_for_other_customer_rejected(self, app, inventory, campaign_data):
        with app.app_context():
            from models.booking import create_booking
            from models.campaign import create_campaign, get_campaign_by_id
            from models.errors import InvalidStateError

            campaign = create_campaign(campaign_data)
            with pytest.raises(InvalidStateError) as exc_info:
                create_booking({
                    'customer_id': inventory['other_customer_id'],
                    'billboard_id': inventory['static_id'],
                    'start_date': '2024-11-01',
                    'end_date': '2024-11-02',
                    'campaign_id': campaign['id'],
                })
            assert 'same customer' in exc_info.value.message
            assert get_campaign_by_id(campaign['id'])['total_value'] == '14000.00'
            assert _count('bookings') == 2

    def test_update_booking_customer_mismatch(self, app, inventory, campaign_data):
        with app.app_context():
            from models.booking import create_booking, get_booking_by_id, update_booking
            from models.campaign import create_campaign
            from models.errors import InvalidStateError

            campaign = create_campaign(campaign_data)
            member = campaign['bookings'][0]['id']

            # Changing the customer of a campaign booking
            with pytest.raises(InvalidStateError):
                update_booking(member, {'customer_id': inventory['other_customer_id']})
            assert get_booking_by_id(member)['customer_id'] == inventory['customer_id']

            # Moving another customer's booking into the campaign
            foreign = create_booking({
                'customer_id': inventory['other_customer_id'],
                'billboard_id': inventory['static_id'],
                'start_date': '2024-11-01',
                'end_date': '2024-11-02',
            })
            with pytest.raises(InvalidStateError):
                update_booking(foreign['id'], {'campaign_id': campaign['id']})
            assert get_booking_by_id(foreign['id'])['campaign_id'] is None

            # Leaving the campaign while switching customer is fine
            assert update_booking(member, {'campaign_id': None,
                                           'customer_id': inventory['other_customer_id']})

    def test_remove_booking_not_in_campaign(self, app, inventory, make_booking, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign, remove_booking_from_campaign
            from models.errors import NotFoundError

            campaign = create_campaign(campaign_data)
            loose = make_booking('2024-11-01', '2024-11-02')

            with pytest.raises(NotFoundError) as exc_info:
                remove_booking_from_campaign(campaign['id'], loose['id'])
            assert exc_info.value.message == 'Booking not found in this campaign'

    def test_empty_campaign_totals(self, app, campaign_data):
        with app.app_context():
            from models.campaign import (
                create_campaign, remove_booking_from_campaign, update_campaign_totals
            )

            campaign = create_campaign(campaign_data)
            for booking in campaign['bookings']:
                remove_booking_from_campaign(campaign['id'], booking['id'])

            totals = update_campaign_totals(campaign['id'])
            assert totals == {'total_value': '0.00', 'start_date': None,
                              'end_date': None, 'booking_count': 0}

    def test_booking_edit_updates_campaign(self, app, campaign_data):
        with app.app_context():
            from models.booking import update_booking
            from models.campaign import create_campaign, get_campaign_by_id

            campaign = create_campaign(campaign_data)
            update_booking(campaign['bookings'][0]['id'], {'end_date': '2024-09-15',
                                                          'notional_value': '15000'})

            refreshed = get_campaign_by_id(campaign['id'])
            assert refreshed['end_date'] == '2024-09-15'
            assert refreshed['total_value'] == '19000.00'

    def test_bookings_not_in_campaign(self, app, inventory, make_booking, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign, get_bookings_not_in_campaign

            first = create_campaign(campaign_data)
            loose = make_booking('2024-11-01', '2024-11-02')

            unassigned = get_bookings_not_in_campaign(inventory['customer_id'])
            assert [b['id'] for b in unassigned] == [loose['id']]

            other_campaign = create_campaign({
                **campaign_data,
                'start_date': '2024-12-01',
                'end_date': '2024-12-02',
                'billboards': [{'billboard_id': inventory['static_id']}],
            })
            candidates = get_bookings_not_in_campaign(inventory['customer_id'],
                                                      exclude_campaign_id=first['id'])
            ids = {b['id'] for b in candidates}
            assert loose['id'] in ids
            assert other_campaign['bookings'][0]['id'] in ids
            assert not ids & {b['id'] for b in first['bookings']}


class TestUpdateDelete:
    """Campaign edits and deletion."""

    def test_update_fields(self, app, inventory, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign, get_campaign_by_id, update_campaign

            campaign = create_campaign(campaign_data)
            assert update_campaign(campaign['id'], {'name': 'Renamed', 'description': 'Q3'})

            refreshed = get_campaign_by_id(campaign['id'])
            assert refreshed['name'] == 'Renamed'
            assert refreshed['description'] == 'Q3'

    def test_update_reversed_dates(self, app, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign, update_campaign
            from models.errors import InvalidStateError

            campaign = create_campaign(campaign_data)
            with pytest.raises(InvalidStateError) as exc_info:
                update_campaign(campaign['id'], {'end_date': '2024-08-01'})
            assert exc_info.value.message == 'end_date cannot be before start_date'

    def test_update_empty_name(self, app, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign, update_campaign
            from models.errors import ValidationError

            campaign = create_campaign(campaign_data)
            with pytest.raises(ValidationError) as exc_info:
                update_campaign(campaign['id'], {'name': ''})
            assert exc_info.value.message == 'Campaign name cannot be empty'

    def test_delete_requires_empty(self, app, campaign_data):
        with app.app_context():
            from models.campaign import (
                create_campaign, delete_campaign, get_campaign_by_id, remove_booking_from_campaign
            )
            from models.errors import InvalidStateError

            campaign = create_campaign(campaign_data)
            with pytest.raises(InvalidStateError):
                delete_campaign(campaign['id'])

            for booking in campaign['bookings']:
                remove_booking_from_campaign(campaign['id'], booking['id'])

            assert delete_campaign(campaign['id']) is True
            assert get_campaign_by_id(campaign['id']) is None

    def test_filtered_search(self, app, campaign_data):
        with app.app_context():
            from models.campaign import create_campaign, get_campaigns_filtered

            campaign = create_campaign(campaign_data)

            by_name = get_campaigns_filtered(search='Monsoon')
            by_code = get_campaigns_filtered(search=campaign['reference_code'])
            none = get_campaigns_filtered(search='Winter')

            assert by_name['total'] == 1
            assert by_name['items'][0]['booking_count'] == 2
            assert by_code['total'] == 1
            assert none['total'] == 0


class TestAvailableBillboards:
    """Tests for get_available_billboards."""

    def test_slots_reported(self, app, inventory, make_booking):
        with app.app_context():
            from models.campaign import get_available_billboards

            static_booking = make_booking('2024-09-05', '2024-09-06')
            make_booking('2024-09-01', '2024-09-03',
                         billboard_id=inventory['digital_id'], slot_number=1)

            result = {b['id']: b for b in get_available_billboards('2024-09-01', '2024-09-10')}

            static = result[inventory['static_id']]
            assert static['is_available'] is False
            assert static['available_slots'] == []
            assert [c['reference_code'] for c in static['conflicts']] == [static_booking['reference_code']]

            digital = result[inventory['digital_id']]
            assert digital['is_available'] is True
            assert digital['available_slots'] == [2, 3]
            assert len(digital['conflicts']) == 1

    def test_full_digital_unavailable(self, app, inventory, make_booking):
        with app.app_context():
            from models.campaign import get_available_billboards

            for slot in (1, 2, 3):
                make_booking('2024-09-01', '2024-09-10',
                             billboard_id=inventory['digital_id'], slot_number=slot)

            result = {b['id']: b for b in get_available_billboards('2024-09-02', '2024-09-03')}
            assert result[inventory['digital_id']]['is_available'] is False
            assert result[inventory['static_id']]['is_available'] is True

    def test_inactive_billboards_skipped(self, app, inventory):
        with app.app_context():
            from models.billboard import create_billboard
            from models.campaign import get_available_billboards

            hidden = create_billboard('BB-STA-T99', 'Under Repair', status='maintenance')
            ids = [b['id'] for b in get_available_billboards('2024-09-01', '2024-09-02')]
            assert hidden not in ids
            assert inventory['static_id'] in ids
