"""BASE-DEFENSE service application."""
