"""Interactive login flow."""
