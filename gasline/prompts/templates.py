"""Replies built from the customer, the draft or configuration."""

from typing import Optional
from urllib.parse import quote_plus

from gasline.conversation.drafts import CylinderDraft, OrderDraft, ProductDraft
from gasline.schemas.customer_schema import Customer
from gasline.schemas.order_schema import DeliveryWindow, Order, PaymentMethod, ServiceVariant
from gasline.utils import format_liters, format_money

VARIANT_LABELS = {
    ServiceVariant.TANK_BY_VOLUME: "Tanque estacionario (por litros)",
    ServiceVariant.TANK_BY_MONEY: "Tanque estacionario (por monto)",
    ServiceVariant.TANK_BY_PERCENTAGE: "Tanque estacionario (por tabulador)",
    ServiceVariant.CYLINDER_RECHARGE: "Recarga de cilindro",
    ServiceVariant.CYLINDER_EXCHANGE: "Canje de cilindro",
}

PAYMENT_LABELS = {
    PaymentMethod.CASH: "Efectivo",
    PaymentMethod.CARD: "Tarjeta",
}

WINDOW_LABELS = {
    DeliveryWindow.MORNING: "Mañana (9am - 1pm)",
    DeliveryWindow.AFTERNOON: "Tarde (2pm - 6pm)",
}


def build_main_menu(customer: Customer, last_order: Optional[Order], business_name: str) -> str:
    greeting = f"¡Hola {customer.first_name}! Bienvenido a {business_name}."
    if last_order is None:
        return (
            f"{greeting}\n¿Qué deseas hacer?\n"
            "1. Hacer un pedido\n2. Actualizar mis datos"
        )
    return (
        f"{greeting}\nTu último pedido fue: {describe_order(last_order)}.\n"
        "¿Qué deseas hacer?\n"
        "1. Repetir mi último pedido\n2. Hacer un pedido nuevo\n3. Actualizar mis datos"
    )


def build_menu_retry(valid_numbers: list[str]) -> str:
    return f"Opción no válida. Responde con {' o '.join(valid_numbers)}."


def build_measure_method_prompt(unit_price: float) -> str:
    return (
        f"El precio actual es de {format_money(unit_price)} por litro. "
        "¿Cómo quieres indicar tu carga?\n"
        "1. Por litros\n2. Por monto en dinero\n3. Por tabulador (porcentaje del tanque)"
    )


def build_percentage_prompt(capacity: float, recommended: int) -> str:
    return (
        f"Tu tanque es de {format_liters(capacity)}. ¿Qué porcentaje quieres llenar? "
        f"Te recomendamos no pasar del {recommended}%."
    )


def build_quantity_prompt(maximum: int) -> str:
    return f"¿Cuántos cilindros son? Puedes pedir de 1 a {maximum}."


def build_quantity_invalid(maximum: int) -> str:
    return f"Escribe un número entero de 1 a {maximum}."


def build_product_summary(product: ProductDraft) -> str:
    if isinstance(product, CylinderDraft):
        return f"{VARIANT_LABELS[product.variant]}: {product.count} cilindro(s)"
    return (
        f"{VARIANT_LABELS[product.variant]}: {format_liters(product.volume)} "
        f"a {format_money(product.unit_price)}/L = {format_money(product.amount)}"
    )


def build_tank_confirmation(product: ProductDraft) -> str:
    return (
        f"Confirmación de pedido:\n{build_product_summary(product)}\n"
        "¿Es correcto?\n1. Sí\n2. No\n"
        "Si es correcto también puedes responder con tu forma de pago (efectivo o tarjeta)."
    )


def build_tracking_codes_prompt(codes: list[str]) -> str:
    lines = ["Estos son los códigos de seguimiento de tus cilindros:"]
    lines.extend(f"  • {code}" for code in codes)
    lines.append("Pega cada código en su cilindro antes de la recolección. ¿Confirmas?")
    lines.append("1. Sí\n2. No")
    return "\n".join(lines)


def build_pickup_scheduled(count: int) -> str:
    return (
        f"Perfecto. Al confirmar tu pedido, un operador pasará a recoger {count} cilindro(s). "
        "Te avisaremos cuando vayan en camino a la planta."
    )


def build_address_confirmation(address: str, maps_url: str) -> str:
    return (
        f"Tu dirección de entrega es:\n{address}\n"
        f"{maps_url}{quote_plus(address)}\n"
        "¿Es correcta?\n1. Sí\n2. No"
    )


def build_order_summary(draft: OrderDraft, courier_wait_minutes: int) -> str:
    lines = ["Resumen de tu pedido:"]
    if draft.product is not None:
        lines.append(f"  {build_product_summary(draft.product)}")
    if isinstance(draft.product, CylinderDraft) and draft.product.tracking_codes:
        lines.append(f"  Códigos: {', '.join(draft.product.tracking_codes)}")
    if draft.payment_method is not None:
        lines.append(f"  Pago: {PAYMENT_LABELS[draft.payment_method]}")
    lines.append(f"  Dirección: {draft.address}")
    if draft.facade_color or draft.door_color:
        lines.append(f"  Fachada: {draft.facade_color or '-'} / Puerta: {draft.door_color or '-'}")
    if draft.delivery_window is not None:
        lines.append(f"  Horario: {WINDOW_LABELS[draft.delivery_window]}")
    lines.append(
        f"Nuestro repartidor esperará un máximo de {courier_wait_minutes} minutos en tu domicilio."
    )
    lines.append("¿Confirmas tu pedido?\n1. Sí\n2. No")
    return "\n".join(lines)


def describe_order(order: Order) -> str:
    label = VARIANT_LABELS[order.service_variant]
    if order.service_variant.is_cylinder:
        return f"{label}, {order.cylinder_count} cilindro(s)"
    parts = [label]
    if order.volume is not None:
        parts.append(format_liters(order.volume))
    if order.amount is not None:
        parts.append(format_money(order.amount))
    return ", ".join(parts)


def build_order_confirmed(order: Order) -> str:
    text = f"¡Pedido #{order.id} confirmado! {describe_order(order)}."
    if order.tracking_codes:
        text += f" Códigos de seguimiento: {', '.join(order.tracking_codes)}."
    return text + " Te avisaremos cuando vaya en camino."


def build_delivery_question(order: Optional[Order]) -> str:
    subject = f"tu pedido #{order.id}" if order is not None and order.id is not None else "tu pedido"
    return f"¿Recibiste {subject} correctamente?\n1. Sí\n2. No"


def build_strike_notice(strikes: int, limit: int) -> str:
    return (
        f"Se te ha asignado un strike ({strikes} de {limit}) porque no fue posible "
        "entregar tu pedido. Tu pedido ha sido reagendado para mañana."
    )


def build_blocked_notice(strikes: int) -> str:
    return (
        f"Has acumulado {strikes} strikes. Tu número ha sido bloqueado y ya no "
        "podrás realizar pedidos."
    )
