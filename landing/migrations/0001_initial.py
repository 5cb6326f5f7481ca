import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='LandingPageConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('section', models.CharField(max_length=50, unique=True)),
                ('hero_background_image', models.CharField(blank=True, max_length=500, null=True)),
                ('hero_headline', models.CharField(blank=True, max_length=255, null=True)),
                ('hero_subtext', models.TextField(blank=True, null=True)),
                ('hero_cta_text', models.CharField(blank=True, max_length=100, null=True)),
                ('hero_cta_link', models.CharField(blank=True, max_length=500, null=True)),
                ('experiences_title', models.CharField(blank=True, max_length=255, null=True)),
                ('experiences_subtitle', models.CharField(blank=True, max_length=255, null=True)),
                ('experiences_description', models.TextField(blank=True, null=True)),
                ('experiences_video_url', models.CharField(blank=True, max_length=500, null=True)),
                ('experiences_video_thumbnail', models.CharField(blank=True, max_length=500, null=True)),
                ('experiences_video_title', models.CharField(blank=True, max_length=255, null=True)),
                ('experiences_cta_text', models.CharField(blank=True, max_length=100, null=True)),
                ('experiences_cta_link', models.CharField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='HeroCard',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('enabled', models.BooleanField(default=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('image', models.CharField(blank=True, max_length=500)),
                ('title', models.CharField(blank=True, max_length=255)),
                ('subtitle', models.CharField(blank=True, max_length=255, null=True)),
                ('navigation_link', models.CharField(blank=True, max_length=500, null=True)),
                ('config', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='hero_cards', to='landing.landingpageconfig')),
            ],
            options={
                'ordering': ['order', 'id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='ExperienceActivity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('enabled', models.BooleanField(default=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('name', models.CharField(blank=True, max_length=255)),
                ('config', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='experience_activities', to='landing.landingpageconfig')),
            ],
            options={
                'verbose_name_plural': 'Experience activities',
                'ordering': ['order', 'id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='ExperienceCard',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('enabled', models.BooleanField(default=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('title', models.CharField(blank=True, max_length=255)),
                ('image', models.CharField(blank=True, max_length=500)),
                ('is_new', models.BooleanField(default=False)),
                ('tour_count', models.CharField(blank=True, max_length=50, null=True)),
                ('config', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='experience_cards', to='landing.landingpageconfig')),
            ],
            options={
                'ordering': ['order', 'id'],
                'abstract': False,
            },
        ),
    ]
