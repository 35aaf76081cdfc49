# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""ai-pod: per-workspace sandbox launcher with a host notification daemon."""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
