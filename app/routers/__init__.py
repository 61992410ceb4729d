# app/routers/__init__.py

# Import all router modules to make them available
from . import auth
from . import users
from . import households
from . import chores
from . import expenses
from . import transactions
from . import events
from . import recurrence_rules
from . import threads
from . import messages
from . import messaging
from . import notifications
from . import realtime

__all__ = [
    "auth",
    "users",
    "households",
    "chores",
    "expenses",
    "transactions",
    "events",
    "recurrence_rules",
    "threads",
    "messages",
    "messaging",
    "notifications",
    "realtime",
]
