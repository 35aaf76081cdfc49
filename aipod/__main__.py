# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Allow ``python -m aipod``; the supervisor uses it to start the daemon."""
from aipod.main import app


app(prog_name="ai-pod")
