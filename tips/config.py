from __future__ import annotations


# Event name a Button fires on a left click inside its rect.
PRIMARY_ACTION = "primary_action"

# Checkout grading (#100). Scores below PASS_MIN fail, PASS_MIN..BAR_MAX pass.
PASS_MIN = 60
BAR_MAX = 100
DEFAULT_BAR = 89

# Simulated network round trip for the async test demo (#102).
FETCH_DELAY_S = 1.5
FETCH_RESPONSE = "Foo"
# Must stay above FETCH_DELAY_S or the preferred test times out.
EXPECTATION_TIMEOUT_S = 2.0
# Fixed wait used by the sleep-based form; must also exceed FETCH_DELAY_S.
SLEEP_WAIT_S = 2.0

# Demo button geometry (x, y, w, h).
BUTTON_RECT = (0, 100, 100, 50)
BUTTON_TITLE = "Foo"

LOG_FORMAT = "[%(levelname)s] %(message)s"
