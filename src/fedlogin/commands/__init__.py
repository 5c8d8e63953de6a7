"""Built-in CLI sub-commands for fedlogin.

* :mod:`~fedlogin.commands.login` -- ``login`` and ``resolve``.
* :mod:`~fedlogin.commands.profile` -- create, list, show and delete
  stored tenant/user profiles.
* :mod:`~fedlogin.commands.config` -- view and modify global settings.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands export a plain callback registered directly on the root app.
"""
