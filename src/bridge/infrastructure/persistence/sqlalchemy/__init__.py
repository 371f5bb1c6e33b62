"""SQLAlchemy persistence for the local and auth provider stores."""
