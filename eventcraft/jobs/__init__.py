"""Background jobs run by the notification scheduler."""
