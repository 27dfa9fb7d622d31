"""
Initial migration for the Accounts domain.

Creates the table:
- users: helpdesk users
"""

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='UserModel',
            fields=[
                ('id', models.CharField(
                    editable=False,
                    help_text='User UUID',
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                )),
                ('name', models.CharField(max_length=150)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('password_hash', models.CharField(max_length=255)),
                ('role', models.CharField(
                    choices=[
                        ('employee', 'Employee'),
                        ('hr', 'HR'),
                        ('admin', 'Admin'),
                        ('it', 'IT'),
                        ('super-admin', 'Super Admin'),
                    ],
                    db_index=True,
                    default='employee',
                    max_length=20,
                )),
                ('department', models.CharField(
                    blank=True,
                    db_index=True,
                    default='',
                    max_length=100,
                )),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('last_login_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'db_table': 'users',
                'ordering': ['name'],
            },
        ),
    ]
