"""backend package: settings, urls y wsgi del proyecto."""
