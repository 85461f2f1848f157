"""
IPython/Jupyter key-completion support for bracket-style access:

    report.site.authors["to<TAB>

This integrates with IPython's tab completion protocol and works for
any index view subclassing BaseIndex, reached through up to two
attribute hops from a variable in the user namespace.
"""

import re
from IPython import get_ipython
from sitecorpus.entities.base import BaseIndex


def completion_for_indexes(self, event):
    """
    Return suggested identifiers for expressions of the form:

        <object>.<index>["<prefix>
        <object>.<attr>.<index>["<prefix>

    Only triggers when <index> is a BaseIndex.
    """

    line = event.line

    match = re.search(r'(\w+)((?:\.\w+){1,2})\["([^"]*)$', line)
    if not match:
        return []

    var_name, attrs, prefix = match.groups()

    shell = get_ipython()
    if shell is None:
        return []

    # Resolve the base object (e.g. "report")
    obj = shell.user_ns.get(var_name)
    if obj is None:
        return []

    # Walk to the index view (e.g. ".site.authors")
    for attr in attrs.strip(".").split("."):
        obj = getattr(obj, attr, None)
        if obj is None:
            return []
    if not isinstance(obj, BaseIndex):
        return []

    # Prefix-based completion (not fuzzy)
    return [i for i in obj.ids() if i.startswith(prefix)]


# Register the completer with IPython
ip = get_ipython()
if ip:
    ip.set_hook("complete_command", completion_for_indexes)
