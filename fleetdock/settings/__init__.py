"""Настройки fleetdock: группы, валидация, загрузка config.json."""
