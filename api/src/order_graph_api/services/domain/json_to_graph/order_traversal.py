#!/usr/bin/env python3
"""Domain-aware traversal of order documents.

Knows the order schema: products with lines, services and items, fulfillments
with shipments, promotions, addresses, accounts, the event log and order totals.
Every recognized entity becomes one node whose label joins its most identifying
fields with '#', for example ``Line: Voice#1#MOBILE#ADD``.

Example order document:
{
  "orderId": "ORD-1",
  "isCancelable": true,
  "products": [
    {"productSequenceNumber": 1, "lineOfBusiness": "WIRELESS",
     "lines": [{"name": "Voice", "lineSequence": 1, "addressSequence": 1}]}
  ],
  "addresses": [{"addressSequence": 1, "zip": "30301"}]
}
"""
import logging
from typing import Any, Callable

from ....models.models import GraphNode
from .accessors import format_date, format_value, get_dict, get_dicts, get_list
from .context import BuildContext
from .sequencing import link_sequence

logger = logging.getLogger(__name__)

ORDER_VERTEX_FIELDS = ("orderId", "orderDate", "orderingChannel", "originatingSystem", "amendedDetails")

# Scalar order properties promoted to their own nodes
PROMOTED_ORDER_FLAGS = (
    ("orderContext", "Context"),
    ("isCancelable", "Cancelable"),
    ("isAmendable", "Amendable"),
)

EntityBuilder = Callable[[BuildContext, dict[str, Any], GraphNode], GraphNode]


def _join(*values: Any) -> str:
    return "#".join(format_value(v) for v in values)


def _status_label(status: dict[str, Any], *extra: str) -> str:
    return "Status: " + ", ".join([format_value(status.get("code")), *extra])


def _add_collection(
    ctx: BuildContext, parent: GraphNode, items: list[dict[str, Any]], entity_type: str, build_one: EntityBuilder
) -> list[GraphNode]:
    """Create one node per item, then chain the siblings by sequence number."""
    children = [build_one(ctx, item, parent) for item in items]
    link_sequence(ctx, children, ctx.rules.chain_fields(entity_type))
    return children


def traverse_order(ctx: BuildContext, data: dict[str, Any]) -> GraphNode:
    """Build the order subgraph of a parsed order document.

    Args:
        ctx: Build context receiving nodes, edges and index entries
        data: Parsed root object

    Returns:
        The root order node
    """
    vertex_data = {key: data[key] for key in ORDER_VERTEX_FIELDS if key in data}
    order = ctx.add_node(
        f"Order: {format_value(data.get('orderId'))}",
        "order",
        None,
        vertex_data,
        status=get_dict(data, "orderStatus") or get_dict(data, "status"),
    )

    for key, caption in PROMOTED_ORDER_FLAGS:
        value = data.get(key)
        if value is None or value == "":
            continue
        ctx.add_node(f"{caption}: {format_value(value)}", "object", order, {key: value})

    customer = get_dict(data, "Customer") or get_dict(data, "customer")
    if customer is not None:
        _add_customer(ctx, customer, order)

    _add_collection(ctx, order, get_dicts(data, "products"), "product", _add_product)
    _add_collection(ctx, order, get_dicts(data, "fulfillments"), "fulfillment", _add_fulfillment)
    _add_collection(ctx, order, get_dicts(data, "promotions"), "promotion", _add_promotion)
    _add_collection(ctx, order, get_dicts(data, "addresses"), "address", _add_address)
    _add_collection(ctx, order, get_dicts(data, "accounts"), "account", _add_account)

    event_log = data.get("eventLog")
    if isinstance(event_log, list):
        ctx.add_node(f"Event Log ({len(event_log)})", "eventLog", order, event_log)

    totals = get_list(data, "orderTotalPrices")
    if totals and isinstance(totals[0], dict):
        ctx.add_node(f"Total: {format_value(totals[0].get('totalPriceAfterTax'))}", "object", order, totals)

    logger.debug(f"Order traversal of {order.label} created {len(ctx.nodes)} nodes")
    return order


def _add_customer(ctx: BuildContext, customer: dict[str, Any], parent: GraphNode) -> GraphNode:
    name = " ".join(format_value(customer[key]) for key in ("firstName", "lastName") if customer.get(key) is not None)
    if not name:
        name = format_value(customer.get("name"))
    return ctx.add_node(f"Customer: {name}", "customer", parent, customer)


def _add_product(ctx: BuildContext, product: dict[str, Any], parent: GraphNode) -> GraphNode:
    node = ctx.add_node(
        "Product: " + _join(product.get("productSequenceNumber"), product.get("lineOfBusiness")),
        "product",
        parent,
        product,
    )

    status = get_dict(product, "productStatus")
    if status is not None:
        ctx.add_node(_status_label(status, format_value(status.get("milestone"))), "status", node, status)

    _add_collection(ctx, node, get_dicts(product, "lines"), "line", _add_line)
    _add_collection(ctx, node, get_dicts(product, "items"), "item", _add_item)

    # 'aggrements' is the spelling used by the order management system
    agreements = product.get("aggrements", product.get("agreements"))
    if isinstance(agreements, list) and agreements:
        tc_keys = ", ".join(format_value(a.get("tcKey")) for a in agreements if isinstance(a, dict))
        ctx.add_node(f"Agreements: {tc_keys}", "object", node, agreements)

    return node


def _add_line(ctx: BuildContext, line: dict[str, Any], parent: GraphNode) -> GraphNode:
    node = ctx.add_node(
        "Line: " + _join(line.get("name"), line.get("lineSequence"), line.get("lineType"), line.get("lineAction")),
        "line",
        parent,
        line,
    )

    status = get_dict(line, "lineStatus")
    if status is not None:
        activation = line.get("activationDate")
        ctx.add_node(
            _status_label(status, f"{format_value(status.get('milestone'))} ({format_date(activation)})"),
            "status",
            node,
            {**status, "activationDate": activation},
        )

    _add_collection(ctx, node, get_dicts(line, "services"), "service", _add_service)
    return node


def _add_service(ctx: BuildContext, service: dict[str, Any], parent: GraphNode) -> GraphNode:
    label = "Service: " + _join(
        service.get("name"),
        service.get("serviceSequence"),
        service.get("type"),
        service.get("serviceType"),
        service.get("action"),
    )
    return ctx.add_node(label, "service", parent, service)


def _add_item(ctx: BuildContext, item: dict[str, Any], parent: GraphNode) -> GraphNode:
    item_sequences = get_list(item, "itemSequences")
    label = "Item: " + _join(
        item.get("id"),
        item_sequences[0] if item_sequences else None,
        item.get("itemType"),
        item.get("itemDescription"),
        item.get("itemAction"),
    )
    node = ctx.add_node(label, "item", parent, item)

    is_return = item.get("isReturnItem")
    if is_return is not None:
        ctx.add_node(f"Return: {format_value(is_return)}", "object", node, {"isReturnItem": is_return})

    status = get_dict(item, "itemStatus")
    if status is not None:
        ctx.add_node(_status_label(status, format_value(status.get("milestone"))), "status", node, status)

    devices = get_dict(item, "deviceDetails")
    for device in [devices] if devices is not None else get_dicts(item, "deviceDetails"):
        ctx.add_node("Device: " + _join(device.get("sku"), device.get("skuDescription")), "object", node, device)

    return node


def _add_fulfillment(ctx: BuildContext, fulfillment: dict[str, Any], parent: GraphNode) -> GraphNode:
    label = "Fulfillment: " + _join(
        fulfillment.get("fulfillmentSequence"),
        fulfillment.get("type"),
        fulfillment.get("name"),
        fulfillment.get("fulfillmentType"),
    )
    node = ctx.add_node(label, "fulfillment", parent, fulfillment)

    status = get_dict(fulfillment, "fulfillmentStatus")
    if status is not None:
        ctx.add_node(_status_label(status), "status", node, status)

    _add_collection(ctx, node, get_dicts(fulfillment, "shipments"), "shipment", _add_shipment)
    return node


def _add_shipment(ctx: BuildContext, shipment: dict[str, Any], parent: GraphNode) -> GraphNode:
    label = "Shipment: " + _join(
        shipment.get("shipmentSequence"), shipment.get("carrier"), format_date(shipment.get("shippedDate"))
    )
    node = ctx.add_node(label, "shipment", parent, shipment)

    shipment_status = shipment.get("shipmentStatus")
    if shipment_status is not None:
        ctx.add_node(f"Status: {format_value(shipment_status)}", "status", node, {"status": shipment_status})
    return node


def _add_promotion(ctx: BuildContext, promo: dict[str, Any], parent: GraphNode) -> GraphNode:
    label = "Promo: " + _join(
        promo.get("name"), promo.get("promotionType"), format_date(promo.get("effectiveDate")), promo.get("status")
    )
    return ctx.add_node(label, "promotion", parent, promo)


def _add_address(ctx: BuildContext, address: dict[str, Any], parent: GraphNode) -> GraphNode:
    label = "Address: " + _join(
        address.get("addressSequence"),
        address.get("addressClassification"),
        address.get("zip"),
        address.get("addressId"),
    )
    return ctx.add_node(label, "address", parent, address)


def _add_account(ctx: BuildContext, account: dict[str, Any], parent: GraphNode) -> GraphNode:
    label = "Account: " + _join(
        account.get("accountSequence"),
        account.get("accountType"),
        account.get("accountSubType"),
        account.get("billingDeliveryPreference"),
    )
    return ctx.add_node(label, "account", parent, account)
