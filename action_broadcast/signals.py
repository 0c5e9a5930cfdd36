"""
Action Broadcast — Django Signals
===================================
Sent after a channel finishes fanning out an intent, when the
SEND_SIGNALS setting is on. Lets Django code observe the bus without
holding a Subscription.

    intent_published.send(sender=channel, intent=intent, delivered=2)

delivered is the number of subscriptions whose callback ran
without raising.
"""

from django.dispatch import Signal

intent_published = Signal()
