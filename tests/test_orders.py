"""
Tests for order detail lookup.

Tests the order reader service and GET /api/order/<orderId>.
"""
import pytest

from attribution_tracker.models.conversion import ConversionProduct, JourneyStep
from attribution_tracker.services.order_reader import OrderNotFoundError, get_order
from tests.fixtures.test_data import FULL_CONVERSION, MINIMAL_CONVERSION


@pytest.fixture
def stored_order(db, make_conversion):
    """Create an order whose journey rows are stored out of sequence."""
    conversion = make_conversion('ORD-1', value=99.5, currency='EUR', utm_campaign='spring')
    db.add_all([
        JourneyStep(conversion_id=conversion.id, url='/checkout', sequence_number=3),
        JourneyStep(conversion_id=conversion.id, url='/home', sequence_number=1),
        JourneyStep(conversion_id=conversion.id, url='/product', sequence_number=2),
        ConversionProduct(conversion_id=conversion.id, product_name='Mug', quantity=2, price=12.0),
    ])
    db.commit()
    return conversion


class TestGetOrder:
    """Test get_order service."""

    def test_not_found(self, db):
        """Test unknown order ids raise OrderNotFoundError."""
        with pytest.raises(OrderNotFoundError) as exc_info:
            get_order(db, 'missing')

        assert exc_info.value.order_id == 'missing'

    def test_journey_sorted_by_sequence(self, db, stored_order):
        """Test journey is returned by sequence number, not storage order."""
        order = get_order(db, 'ORD-1')

        assert [step['sequence_number'] for step in order['journey']] == [1, 2, 3]
        assert [step['url'] for step in order['journey']] == ['/home', '/product', '/checkout']

    def test_merges_conversion_and_children(self, db, stored_order):
        """Test conversion columns sit next to products and journey."""
        order = get_order(db, 'ORD-1')

        assert order['id'] == stored_order.id
        assert order['order_id'] == 'ORD-1'
        assert order['utm_campaign'] == 'spring'
        assert order['value'] == 99.5
        assert [product['product_name'] for product in order['products']] == ['Mug']

    def test_children_of_other_orders_excluded(self, db, stored_order, make_conversion):
        """Test only rows owned by the matched conversion are returned."""
        other = make_conversion('ORD-2')
        db.add(JourneyStep(conversion_id=other.id, url='/elsewhere', sequence_number=1))
        db.commit()

        order = get_order(db, 'ORD-1')

        assert '/elsewhere' not in [step['url'] for step in order['journey']]


class TestOrderEndpoint:
    """Test GET /api/order/<orderId>."""

    def test_not_found_is_404(self, client):
        """Test unknown orders give a 404 envelope, not a generic failure."""
        response = client.get('/api/order/does-not-exist')

        assert response.status_code == 404
        assert response.get_json() == {
            'success': False,
            'error': 'Order not found'
        }

    def test_track_then_fetch(self, client):
        """Test a tracked order can be read back with products and journey."""
        tracked = client.post('/api/track-conversion', json=MINIMAL_CONVERSION).get_json()

        response = client.get('/api/order/A100')

        assert response.status_code == 200
        data = response.get_json()

        assert data['success'] is True
        order = data['order']
        assert order['id'] == tracked['conversionId']
        assert order['order_id'] == 'A100'
        assert order['currency'] == 'USD'
        assert len(order['products']) == 1
        assert order['products'][0]['product_name'] == 'Shirt'
        assert [(s['sequence_number'], s['url']) for s in order['journey']] == [(1, '/x'), (2, '/y')]

    def test_full_order_fields(self, client):
        """Test snake_case columns are exposed on the order."""
        client.post('/api/track-conversion', json=FULL_CONVERSION)

        order = client.get('/api/order/5551234').get_json()['order']

        assert order['first_attr_campaign'] == 'Brand Awareness'
        assert order['customer_email'] == 'jane@example.com'
        assert order['journey_length'] == 4
        assert len(order['products']) == 3
        assert [s['page_type'] for s in order['journey']] == ['home', 'collection', 'product', 'cart']
        assert order['converted_at'] is not None

    def test_duplicate_order_returns_one(self, client):
        """Test duplicated order ids still resolve to a single order."""
        first = client.post('/api/track-conversion', json=MINIMAL_CONVERSION).get_json()
        second = client.post('/api/track-conversion', json=MINIMAL_CONVERSION).get_json()

        response = client.get('/api/order/A100')

        assert response.status_code == 200
        order = response.get_json()['order']
        assert order['id'] in (first['conversionId'], second['conversionId'])
        assert len(order['products']) == 1
        assert len(order['journey']) == 2
