"""Оркестрация операций над парком хостов."""
