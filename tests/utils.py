def product_payload(code="P0001", **overrides):
    """Valid create/update body; keyword arguments replace or add fields."""
    payload = {
        "code": code,
        "name": f"Product {code}",
        "category": "Beverages",
        "brand": "Acme",
        "type": "Bottle",
        "description": "A sample product",
    }
    payload.update(overrides)
    return payload
