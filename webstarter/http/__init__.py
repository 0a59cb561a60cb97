"""Request context, response model and response writing."""
