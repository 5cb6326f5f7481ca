from urllib.parse import quote

from django.conf import settings

from ..pricing import format_inr


def booking_message(destination):
    price = format_inr(destination.display_price)
    category = destination.category.name
    if destination.subcategory_id:
        category = f"{category} - {destination.subcategory.name}"

    lines = [
        f'Hi! I\'m interested in booking "{destination.name}" for {price}.',
        '',
        'Destination Details:',
        f"Location: {destination.location}",
        f"Category: {category}",
        f"Price: {price}",
    ]
    if destination.pickup_location:
        lines.append(f"Pickup: {destination.pickup_location}")
    if destination.image_url:
        lines.append(f"Image: {destination.image_url}")
    lines += ['', 'Please provide more information about availability and booking process.']
    return '\n'.join(lines)


def whatsapp_url(destination, number=None):
    """wa.me deep link carrying a pre-filled booking enquiry."""
    number = number or settings.WHATSAPP_NUMBER
    return f"https://wa.me/{number}?text={quote(booking_message(destination), safe='')}"
