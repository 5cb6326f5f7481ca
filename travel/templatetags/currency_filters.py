from django import template

from ..pricing import format_inr
from ..services.contact import whatsapp_url

register = template.Library()


@register.filter
def inr_format(value):
    """
    Format an amount in rupees: 12,500 -> ₹12,500
    """
    try:
        return format_inr(value)
    except (ArithmeticError, ValueError, TypeError):
        return "₹0"


@register.filter
def whatsapp_link(destination):
    return whatsapp_url(destination)
