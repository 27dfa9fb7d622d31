"""
Django Admin for the Tickets domain.

Read-mostly views for support operators; history rows are
append-only and therefore shown read-only.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    DomainEventModel,
    TicketAttachmentModel,
    TicketCommentModel,
    TicketFieldHistoryModel,
    TicketModel,
    TicketStatusHistoryModel,
)

BADGE_HTML = (
    '<span style="background-color: {}; color: white; padding: 3px 8px; '
    'border-radius: 3px; font-size: 11px;">{}</span>'
)

STATUS_COLORS = {
    'Open': '#17a2b8',
    'In Progress': '#ffc107',
    'Resolved': '#28a745',
    'Closed': '#343a40',
}

PRIORITY_COLORS = {
    'Low': '#28a745',
    'Medium': '#ffc107',
    'High': '#fd7e14',
    'Critical': '#dc3545',
}


class TicketCommentInline(admin.TabularInline):
    model = TicketCommentModel
    extra = 0
    fields = ['created_at', 'author_id', 'is_internal', 'content']
    readonly_fields = fields
    can_delete = False


class TicketStatusHistoryInline(admin.TabularInline):
    model = TicketStatusHistoryModel
    extra = 0
    fields = ['position', 'status', 'changed_at', 'comment']
    readonly_fields = fields
    can_delete = False


class TicketFieldHistoryInline(admin.TabularInline):
    model = TicketFieldHistoryModel
    extra = 0
    fields = ['position', 'field', 'old_value', 'new_value', 'changed_at']
    readonly_fields = fields
    can_delete = False


class TicketAttachmentInline(admin.TabularInline):
    model = TicketAttachmentModel
    extra = 0
    fields = ['position', 'original_name', 'url']
    readonly_fields = fields
    can_delete = False


@admin.register(TicketModel)
class TicketAdmin(admin.ModelAdmin):
    list_display = [
        'ticket_number',
        'title',
        'status_badge',
        'priority_badge',
        'category',
        'mood',
        'requester_department',
        'assignee_id',
        'created_at',
    ]

    list_filter = [
        'status',
        'priority',
        'category',
        'mood',
        'created_at',
    ]

    search_fields = [
        'id',
        'ticket_number',
        'title',
        'description',
        'requester_id',
        'assignee_id',
    ]

    readonly_fields = [
        'id',
        'ticket_number',
        'requester',
        'assignee',
        'created_at',
        'updated_at',
        'resolved_at',
    ]

    fieldsets = [
        ('Identification', {
            'fields': ['id', 'ticket_number', 'title', 'description'],
        }),
        ('Triage', {
            'fields': ['status', 'priority', 'category', 'mood'],
        }),
        ('People', {
            'fields': ['requester_id', 'requester', 'requester_department',
                       'assignee_id', 'assignee'],
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at', 'resolved_at'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [
        TicketStatusHistoryInline,
        TicketFieldHistoryInline,
        TicketCommentInline,
        TicketAttachmentInline,
    ]

    ordering = ['-created_at']

    date_hierarchy = 'created_at'

    @admin.display(description='Status')
    def status_badge(self, obj):
        return format_html(BADGE_HTML, STATUS_COLORS.get(obj.status, '#6c757d'), obj.status)

    @admin.display(description='Priority')
    def priority_badge(self, obj):
        return format_html(BADGE_HTML, PRIORITY_COLORS.get(obj.priority, '#6c757d'), obj.priority)


@admin.register(DomainEventModel)
class DomainEventAdmin(admin.ModelAdmin):
    list_display = [
        'short_event_id',
        'event_type',
        'aggregate_type',
        'short_aggregate_id',
        'sequence',
        'occurred_at',
    ]

    list_filter = [
        'event_type',
        'aggregate_type',
        'occurred_at',
    ]

    search_fields = [
        'event_id',
        'aggregate_id',
        'event_type',
    ]

    readonly_fields = [
        'event_id',
        'event_type',
        'aggregate_type',
        'aggregate_id',
        'event_data',
        'version',
        'sequence',
        'occurred_at',
        'recorded_at',
    ]

    @admin.display(description='Event ID')
    def short_event_id(self, obj):
        return obj.event_id[:8] + '...'

    @admin.display(description='Aggregate')
    def short_aggregate_id(self, obj):
        return obj.aggregate_id[:8] + '...'
