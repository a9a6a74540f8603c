"""Тонкий слой над docker SDK для удалённых хостов."""
