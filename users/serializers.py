from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6)
    username = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ('id', 'email', 'password', 'name', 'avatar', 'username', 'role')
        read_only_fields = ('role',)

    def validate_email(self, value):
        value = User.objects.normalize_email(value).lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("User with this email already exists")
        return value

    def validate_username(self, value):
        if value and User.objects.filter(username=value).exists():
            raise serializers.ValidationError("This username is taken")
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        # Username falls back to the email address
        validated_data['username'] = validated_data.get('username') or validated_data['email']
        user = User(**validated_data)
        user.role = User.Role.USER
        user.set_password(password)
        user.save()
        return user


class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ('id', 'name', 'email', 'role')


class AdminUserSerializer(serializers.ModelSerializer):
    destination_count = serializers.IntegerField(read_only=True, default=0)
    comment_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = User
        fields = (
            'id', 'email', 'name', 'role', 'phone', 'is_active',
            'date_joined', 'last_login', 'destination_count', 'comment_count',
        )
        read_only_fields = fields
