"""
Serializers for authentication and profiles
"""
from rest_framework import serializers
from .models import Profile


class ProfileSerializer(serializers.ModelSerializer):
    """Serializer for Profile model"""

    class Meta:
        model = Profile
        fields = ['id', 'email', 'full_name', 'first_name', 'last_name', 'description']
        read_only_fields = ['id']
