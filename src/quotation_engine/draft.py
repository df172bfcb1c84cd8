"""
Payload preparation for creating or updating a quotation.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from .price_resolver import resolve_quantity


def sanitize_item(vehicle_id: str, quantity: Any = None, options: Iterable[Mapping[str, Any]] = (),
                  accessories: Iterable[Mapping[str, Any]] = (), color: Optional[str] = None,
                  discount: Any = None, promotion_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Build one ``items[]`` entry of a create/update request.

    Empty selections are dropped, accessory quantities default to 1 and
    empty add-on lists are omitted.
    """
    if not vehicle_id:
        raise ValueError("vehicle_id is required")

    item: Dict[str, Any] = {
        "vehicle_id": vehicle_id,
        "quantity": quantity or 1,
    }
    if color:
        item["color"] = color
    if discount:
        item["discount"] = discount
    if promotion_id:
        item["promotion_id"] = promotion_id

    clean_options = [
        {"option_id": option["option_id"]}
        for option in options
        if option and option.get("option_id")
    ]
    clean_accessories = [
        {
            "accessory_id": accessory["accessory_id"],
            "quantity": resolve_quantity(accessory.get("quantity")),
        }
        for accessory in accessories
        if accessory and accessory.get("accessory_id")
    ]
    if clean_options:
        item["options"] = clean_options
    if clean_accessories:
        item["accessories"] = clean_accessories
    return item
