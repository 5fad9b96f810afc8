"""Django app configuration for django-reservations."""

from django.apps import AppConfig


class DjangoReservationsConfig(AppConfig):
    """App configuration for django-reservations."""

    name = "django_reservations"
    verbose_name = "Django Reservations"
