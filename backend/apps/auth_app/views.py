"""
Authentication views
"""
from rest_framework import generics, serializers
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView
from django.contrib.auth.models import User

from .models import Profile
from .serializers import ProfileSerializer


class EmailTokenObtainPairSerializer(serializers.Serializer):
    """Custom serializer that allows login with email instead of username"""
    email = serializers.EmailField(required=True)
    password = serializers.CharField(required=True, write_only=True)

    def validate(self, attrs):
        from django.contrib.auth import authenticate
        from rest_framework_simplejwt.tokens import RefreshToken

        email = attrs.get('email')
        password = attrs.get('password')

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            raise serializers.ValidationError('No active account found with the given credentials')

        user = authenticate(username=user.username, password=password)
        if user is None:
            raise serializers.ValidationError('No active account found with the given credentials')

        if not user.is_active:
            raise serializers.ValidationError('User account is disabled')

        refresh = RefreshToken.for_user(user)

        return {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }


class EmailTokenObtainPairView(TokenObtainPairView):
    """Custom token view that accepts email instead of username"""
    serializer_class = EmailTokenObtainPairSerializer


class CurrentProfileView(generics.RetrieveAPIView):
    """Get the profile of the authenticated user"""
    serializer_class = ProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        profile = Profile.objects.filter(user=self.request.user).first()
        if profile is None:
            raise NotFound('No profile linked to this account')
        return profile
