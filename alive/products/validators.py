"""
Advertised product payload checks.

Updates are checked field by field, then the cross-field rules (price
ordering, order quantity ordering, percentage cap) are re-checked against the
product as it would look after the update.
"""
from alive.core.errors import ValidationError
from alive.core.validators import to_decimal, to_int, validate_required

COMMISSION_TYPES = ['percentage', 'fixed']


def _positive_decimal(value, message):
    number = to_decimal(value)
    if number is None or number <= 0:
        raise ValidationError(message)
    return number


def _validate_fields(data):
    """Per-field rules shared by create and update; returns the parsed numbers"""
    parsed = {}

    if 'name' in data:
        validate_required(data['name'], 'Product name', 2)
    if 'brand' in data:
        validate_required(data['brand'], 'Brand name', 2)
    if 'category' in data:
        validate_required(data['category'], 'Category', 2)
    if 'image_url' in data:
        validate_required(data['image_url'], 'Image URL', 5)

    if 'mrp' in data:
        parsed['mrp'] = _positive_decimal(data['mrp'], 'MRP must be a positive number')
    if 'discounted_price' in data:
        parsed['discounted_price'] = _positive_decimal(data['discounted_price'], 'Discounted price must be a positive number')

    if data.get('discount_percent') is not None:
        percent = to_decimal(data['discount_percent'])
        if percent is None or percent < 0 or percent > 100:
            raise ValidationError('Discount percent must be between 0 and 100')
        parsed['discount_percent'] = percent

    if 'stock_quantity' in data:
        stock = to_int(data['stock_quantity'])
        if stock is None or stock < 0:
            raise ValidationError('Stock quantity must be a non-negative integer')
        parsed['stock_quantity'] = stock

    if 'min_order_qty' in data:
        min_qty = to_int(data['min_order_qty'])
        if min_qty is None or min_qty < 1:
            raise ValidationError('Minimum order quantity must be at least 1')
        parsed['min_order_qty'] = min_qty

    if 'max_order_qty' in data:
        max_qty = to_int(data['max_order_qty'])
        if max_qty is None or max_qty < 1:
            raise ValidationError('Maximum order quantity must be at least 1')
        parsed['max_order_qty'] = max_qty

    if 'commission_type' in data:
        if data['commission_type'] not in COMMISSION_TYPES:
            raise ValidationError('Commission type must be "percentage" or "fixed"')
        parsed['commission_type'] = data['commission_type']

    if 'commission_value' in data:
        value = to_decimal(data['commission_value'])
        if value is None or value < 0:
            raise ValidationError('Commission value must be a non-negative number')
        parsed['commission_value'] = value

    return parsed


def _validate_combined(values):
    """Cross-field rules on the complete set of values"""
    mrp = values.get('mrp')
    discounted_price = values.get('discounted_price')
    if mrp is not None and discounted_price is not None and discounted_price > mrp:
        raise ValidationError('Discounted price cannot be greater than MRP')

    min_qty = values.get('min_order_qty')
    max_qty = values.get('max_order_qty')
    if min_qty is not None and max_qty is not None and max_qty < min_qty:
        raise ValidationError('Maximum order quantity must be greater than or equal to minimum')

    commission_value = values.get('commission_value')
    if values.get('commission_type') == 'percentage' and commission_value is not None and commission_value > 100:
        raise ValidationError('Percentage commission cannot exceed 100%')


def validate_product(data):
    """Validate a new product; returns the parsed numeric values with defaults applied"""
    validate_required(data.get('name'), 'Product name', 2)
    validate_required(data.get('brand'), 'Brand name', 2)
    validate_required(data.get('category'), 'Category', 2)
    validate_required(data.get('image_url'), 'Image URL', 5)

    if data.get('mrp') is None:
        raise ValidationError('MRP is required')
    _positive_decimal(data['mrp'], 'MRP must be a positive number')
    if data.get('discounted_price') is None:
        raise ValidationError('Discounted price is required')

    parsed = _validate_fields(data)
    values = {
        'min_order_qty': 1,
        'max_order_qty': 10,
        'commission_type': 'percentage',
        **parsed,
    }
    _validate_combined(values)
    return parsed


def validate_product_update(data, product):
    """Validate a partial update against the stored ``product``"""
    parsed = _validate_fields(data)
    values = {
        'mrp': product.mrp,
        'discounted_price': product.discounted_price,
        'min_order_qty': product.min_order_qty,
        'max_order_qty': product.max_order_qty,
        'commission_type': product.commission_type,
        'commission_value': product.commission_value,
        **parsed,
    }
    _validate_combined(values)
    return parsed
