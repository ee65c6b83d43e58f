"""Routing: compiled route table and path building.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes. The same path syntax
(``/users/{id:int}``) drives both matching and link generation.
"""
