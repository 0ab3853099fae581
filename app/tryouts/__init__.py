"""
Tryouts app: time-boxed chats in which a team evaluates an applicant.

Related apps:
    - authentication: User model for participants
    - chat: Rooms, event broadcaster and socket consumer

Usage:
    from tryouts.services import TryoutLifecycleService

    result = TryoutLifecycleService.start_tryout("app-17", started_by=captain)
    TryoutLifecycleService.post_message(result.data.id, captain, "Welcome!")
"""
