from app.core.logging import format_event


def test_format_event_renders_fields_in_order():
    assert format_event("join attempt failed", attempt=1, retryable=True, error="Timed out") == (
        "join attempt failed | attempt=1 retryable=True error='Timed out'"
    )


def test_format_event_accepts_a_message_field():
    # Playwright pageerror and snapshot failures log their text under "message"
    assert format_event("playwright pageerror", message="boom") == "playwright pageerror | message='boom'"


def test_format_event_without_fields():
    assert format_event("leave start") == "leave start"
