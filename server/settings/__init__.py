"""Main settings file for the project.

Components are included in order, later components may override
values defined by earlier ones.
"""

import django_stubs_ext
from split_settings.tools import include

# Makes generic admin and queryset classes subscriptable at runtime
django_stubs_ext.monkeypatch()

include(
    'components/common.py',
    'components/storages.py',
    'components/assets.py',
)
