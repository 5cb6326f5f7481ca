from rest_framework import serializers
from taggit.serializers import TaggitSerializer, TagListSerializerField

from users.serializers import UserSummarySerializer

from . import form_engine
from .models import (
    Category, Comment, Destination, FormField, Like, ServiceProviderCategory, Subcategory, View,
)


class SubcategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Subcategory
        fields = ('id', 'name', 'description', 'category', 'created_at', 'updated_at')
        read_only_fields = ('category',)


class CategorySerializer(serializers.ModelSerializer):
    subcategories = SubcategorySerializer(many=True, read_only=True)
    destination_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = (
            'id', 'name', 'slug', 'description', 'subcategories',
            'destination_count', 'created_at', 'updated_at',
        )

    def get_destination_count(self, obj):
        count = getattr(obj, 'destination_count', None)
        if count is None:
            count = obj.destinations.count()
        return count


class CategoryRefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ('id', 'name', 'slug')


class SubcategoryRefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Subcategory
        fields = ('id', 'name')


class FormFieldSerializer(serializers.ModelSerializer):
    options_list = serializers.SerializerMethodField()

    class Meta:
        model = FormField
        fields = (
            'id', 'name', 'label', 'field_type', 'required', 'placeholder',
            'options', 'options_list', 'order', 'width',
        )

    def get_options_list(self, obj):
        return form_engine.parse_options(obj.options)


class DestinationSerializer(TaggitSerializer, serializers.ModelSerializer):
    category = CategoryRefSerializer(read_only=True)
    subcategory = SubcategoryRefSerializer(read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    approved_by = UserSummarySerializer(read_only=True)
    tags = TagListSerializerField(read_only=True)
    comment_count = serializers.SerializerMethodField()
    like_count = serializers.SerializerMethodField()

    class Meta:
        model = Destination
        fields = (
            'id', 'name', 'description', 'location', 'latitude', 'longitude',
            'pickup_location', 'price', 'base_price', 'markup_percentage', 'final_price',
            'image_url', 'custom_fields', 'tags', 'category', 'subcategory',
            'created_by', 'status', 'approved_by', 'approved_at', 'rejection_reason',
            'rating', 'view_count', 'comment_count', 'like_count', 'created_at', 'updated_at',
        )
        read_only_fields = fields

    def get_comment_count(self, obj):
        return obj.comments.count()

    def get_like_count(self, obj):
        return obj.likes.count()


class CommentSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ('id', 'content', 'rating', 'user', 'destination', 'created_at')
        read_only_fields = ('destination',)


class LikeSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Like
        fields = ('id', 'user', 'created_at')


class ViewSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = View
        fields = ('id', 'user', 'ip_address', 'created_at')


class AssignmentSerializer(serializers.ModelSerializer):
    category = CategoryRefSerializer(read_only=True)
    subcategory = SubcategoryRefSerializer(read_only=True)

    class Meta:
        model = ServiceProviderCategory
        fields = ('id', 'category', 'subcategory', 'created_at')
