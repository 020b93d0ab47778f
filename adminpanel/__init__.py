"""Admin panel backend: accounts, roles, menus and JWT sessions."""
