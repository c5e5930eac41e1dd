"""
Order form prefill from query parameters.

Links into the form (e.g. from an order confirmation email) carry the
order's details in the query string. Each field accepts a canonical name
or an alias; the canonical name wins when both are present.
"""

from __future__ import annotations

from typing import Dict, Mapping, Tuple


PREFILL_PARAMS: Dict[str, Tuple[str, ...]] = {
    "order_number": ("orderNumber", "orderId"),
    "creator_name": ("creatorName", "creatorFullName"),
    "quantity_ordered": ("quantityOrdered", "totalItemsInOrder"),
    "submitted_url": ("submittedUrl",),
    "order_confirmation_link": ("orderConfirmationLink", "orderStatusUrl"),
    "message": ("message",),
}


def prefill_from_query(args: Mapping[str, str]) -> Dict[str, str]:
    """
    Map query parameters to form field values.

    Empty parameters are ignored, as are parameters that match no field.

    Args:
        args: Query parameters (e.g. flask.request.args)

    Returns:
        Dict of form field name -> value for the fields present
    """
    values: Dict[str, str] = {}
    for field_name, param_names in PREFILL_PARAMS.items():
        for param in param_names:
            value = args.get(param)
            if value:
                values[field_name] = value
                break
    return values
