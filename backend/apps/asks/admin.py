from django.contrib import admin

from .models import AskParticipant, AskSession, ConversationPlan, ConversationPlanStep, ConversationThread, Message


class AskParticipantInline(admin.TabularInline):
    model = AskParticipant
    extra = 0
    raw_id_fields = ('user',)
    readonly_fields = ('invite_token', 'joined_at', 'last_active')


@admin.register(AskSession)
class AskSessionAdmin(admin.ModelAdmin):
    list_display = ('key', 'status', 'conversation_mode', 'project', 'created_at')
    list_filter = ('status', 'conversation_mode', 'is_anonymous')
    search_fields = ('key', 'question')
    readonly_fields = ('id', 'created_at', 'updated_at')
    raw_id_fields = ('project', 'challenge')
    inlines = [AskParticipantInline]


@admin.register(ConversationThread)
class ConversationThreadAdmin(admin.ModelAdmin):
    list_display = ('id', 'ask_session', 'user', 'is_shared', 'created_at')
    list_filter = ('is_shared',)
    raw_id_fields = ('ask_session', 'user')


class ConversationPlanStepInline(admin.TabularInline):
    model = ConversationPlanStep
    extra = 0


@admin.register(ConversationPlan)
class ConversationPlanAdmin(admin.ModelAdmin):
    list_display = ('title', 'conversation_thread', 'status', 'completed_steps', 'total_steps')
    list_filter = ('status',)
    raw_id_fields = ('conversation_thread',)
    inlines = [ConversationPlanStepInline]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('ask_session', 'sender_type', 'user', 'created_at')
    list_filter = ('sender_type', 'message_type')
    search_fields = ('content',)
    raw_id_fields = ('ask_session', 'conversation_thread', 'user', 'plan_step')
