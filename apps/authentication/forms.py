"""Admin forms for the email-based User model"""
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from .models import User


class HureUserCreationForm(UserCreationForm):
    class Meta:
        model = User
        fields = ('email', 'organization')


class HureUserChangeForm(UserChangeForm):
    class Meta:
        model = User
        fields = '__all__'
