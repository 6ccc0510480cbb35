"""
Account administration for the portal database.

Examples:
  python scripts/manage_users.py create-user --username jdoe --email j.doe@eil.com \
      --role employee --first-name J --last-name Doe
  python scripts/manage_users.py deactivate jdoe
  python scripts/manage_users.py login-attempts --limit 50

DATABASE_URL selects the database, exactly as for the API server.
"""

from portal.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
