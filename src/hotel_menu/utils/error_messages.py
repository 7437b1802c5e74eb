"""User-facing rewrites of raw database error messages.

Store errors (constraint violations, permission failures, connection drops)
arrive as driver text that means little to a hotel admin. ``friendly_error``
maps the common families to plain language and passes anything else through.
"""

GENERIC_ERROR = "Something went wrong. Please try again."


def friendly_error(message: str) -> str:
    """
    Rewrite a raw store error message into plain language.

    Args:
        message: Raw error text (e.g., str() of a driver exception)

    Returns:
        A user-facing message; the original text when no rule matches
    """
    m = (message or "").lower()

    if "duplicate key value" in m or "unique constraint" in m:
        return "This value already exists. Please choose a different one."
    if "row-level security" in m or "permission denied" in m:
        return "You do not have permission to perform this action."
    if "invalid input syntax" in m:
        return "Some values are invalid. Please check the form and try again."
    if "network" in m or "failed to fetch" in m or "could not connect" in m:
        return "Network error. Please check your connection and try again."

    return message or GENERIC_ERROR
