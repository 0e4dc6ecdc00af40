# -*- coding: utf-8 -*-
from django.db import connection


def supports_for_update() -> bool:
    return getattr(connection.features, "has_select_for_update", False)


def for_update(qs):
    return qs.select_for_update() if supports_for_update() else qs
