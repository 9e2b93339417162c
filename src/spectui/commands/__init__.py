"""Built-in CLI sub-commands for spectui.

* :mod:`~spectui.commands.config` -- view and modify global settings.
* :mod:`~spectui.commands.inspect` -- print operations and schemas of a
  document without starting the browser.

Each module exports a :class:`typer.Typer` sub-application registered on the
root app in :func:`~spectui.app.main`.
"""
