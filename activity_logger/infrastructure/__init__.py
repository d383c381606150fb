"""Infrastructure: SQLAlchemy persistence of activity log rows."""
