"""
Initial migration for the Tickets domain.

Creates the tables:
- tickets: aggregate root
- ticket_comments, ticket_status_history, ticket_field_history,
  ticket_attachments: aggregate children
- domain_events: Event Store
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


STATUS_CHOICES = [
    ('Open', 'Open'),
    ('In Progress', 'In Progress'),
    ('Resolved', 'Resolved'),
    ('Closed', 'Closed'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Table: tickets
        # =================================================================
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(
                    editable=False,
                    help_text='Ticket UUID',
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                )),
                ('ticket_number', models.CharField(
                    help_text='Human friendly reference',
                    max_length=32,
                    unique=True,
                )),
                ('title', models.CharField(db_index=True, max_length=200)),
                ('description', models.TextField()),
                ('category', models.CharField(
                    choices=[('IT', 'IT'), ('HR', 'HR'), ('Admin', 'Admin')],
                    db_index=True,
                    default='IT',
                    max_length=20,
                )),
                ('status', models.CharField(
                    choices=STATUS_CHOICES,
                    db_index=True,
                    default='Open',
                    max_length=20,
                )),
                ('priority', models.CharField(
                    choices=[
                        ('Low', 'Low'),
                        ('Medium', 'Medium'),
                        ('High', 'High'),
                        ('Critical', 'Critical'),
                    ],
                    db_index=True,
                    default='Medium',
                    max_length=20,
                )),
                ('mood', models.CharField(
                    choices=[
                        ('angry', 'Angry'),
                        ('frustrated', 'Frustrated'),
                        ('neutral', 'Neutral'),
                        ('satisfied', 'Satisfied'),
                        ('urgent', 'Urgent'),
                    ],
                    db_index=True,
                    default='neutral',
                    help_text='AI-derived sentiment (staff only)',
                    max_length=20,
                )),
                ('requester_id', models.CharField(db_index=True, max_length=36)),
                ('requester', models.JSONField(default=dict, help_text='Requester snapshot')),
                ('requester_department', models.CharField(
                    blank=True,
                    db_index=True,
                    default='',
                    max_length=100,
                )),
                ('assignee_id', models.CharField(
                    blank=True,
                    db_index=True,
                    max_length=36,
                    null=True,
                )),
                ('assignee', models.JSONField(
                    blank=True,
                    help_text='Assignee snapshot',
                    null=True,
                )),
                ('created_at', models.DateTimeField(
                    db_index=True,
                    default=django.utils.timezone.now,
                )),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'Ticket',
                'verbose_name_plural': 'Tickets',
                'db_table': 'tickets',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'created_at'], name='idx_ticket_status_created'),
                    models.Index(fields=['category', 'created_at'], name='idx_ticket_category_created'),
                    models.Index(fields=['requester_id', 'created_at'], name='idx_ticket_requester_created'),
                ],
            },
        ),

        # =================================================================
        # Aggregate children
        # =================================================================
        migrations.CreateModel(
            name='TicketCommentModel',
            fields=[
                ('id', models.CharField(
                    editable=False,
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                )),
                ('content', models.TextField()),
                ('author_id', models.CharField(db_index=True, max_length=36)),
                ('author', models.JSONField(default=dict)),
                ('is_internal', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='comments',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_comments',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='TicketStatusHistoryModel',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField()),
                ('status', models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ('changed_by', models.JSONField(default=dict)),
                ('changed_at', models.DateTimeField()),
                ('comment', models.TextField(blank=True, default='')),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='status_history',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_status_history',
                'ordering': ['position'],
                'constraints': [
                    models.UniqueConstraint(
                        fields=('ticket', 'position'),
                        name='unique_status_history_position',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='TicketFieldHistoryModel',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField()),
                ('field', models.CharField(max_length=20)),
                ('old_value', models.CharField(blank=True, max_length=200, null=True)),
                ('new_value', models.CharField(blank=True, max_length=200, null=True)),
                ('changed_by', models.JSONField(default=dict)),
                ('changed_at', models.DateTimeField()),
                ('comment', models.TextField(blank=True, default='')),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='field_history',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_field_history',
                'ordering': ['position'],
                'constraints': [
                    models.UniqueConstraint(
                        fields=('ticket', 'position'),
                        name='unique_field_history_position',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='TicketAttachmentModel',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField()),
                ('url', models.URLField(max_length=500)),
                ('original_name', models.CharField(blank=True, default='', max_length=255)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='attachments',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_attachments',
                'ordering': ['position'],
            },
        ),

        # =================================================================
        # Table: domain_events (Event Store)
        # =================================================================
        migrations.CreateModel(
            name='DomainEventModel',
            fields=[
                ('event_id', models.CharField(
                    help_text='Event UUID',
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                )),
                ('event_type', models.CharField(
                    db_index=True,
                    help_text='Event type (e.g. TicketCreatedEvent)',
                    max_length=100,
                )),
                ('aggregate_type', models.CharField(
                    db_index=True,
                    help_text='Aggregate type (e.g. Ticket)',
                    max_length=100,
                )),
                ('aggregate_id', models.CharField(db_index=True, max_length=36)),
                ('event_data', models.JSONField(default=dict)),
                ('version', models.IntegerField(default=1, help_text='Event schema version')),
                ('sequence', models.BigIntegerField(
                    default=0,
                    help_text='Position within the aggregate',
                )),
                ('occurred_at', models.DateTimeField()),
                ('recorded_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Domain Event',
                'verbose_name_plural': 'Domain Events',
                'db_table': 'domain_events',
                'ordering': ['recorded_at'],
                'indexes': [
                    models.Index(fields=['aggregate_id', 'sequence'], name='idx_event_aggregate_seq'),
                    models.Index(fields=['aggregate_type', 'recorded_at'], name='idx_event_type_recorded'),
                    models.Index(fields=['event_type', 'recorded_at'], name='idx_event_etype_recorded'),
                ],
            },
        ),
    ]
