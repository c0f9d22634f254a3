"""
Asks URLs
"""
from django.urls import path

from . import views

urlpatterns = [
    # Raw async views; the token route comes first so 'token' is never read as a key
    path('token/<str:token>/context/', views.ask_context_by_token, name='ask-context-by-token'),
    path('<str:key>/context/', views.ask_context, name='ask-context'),
]
