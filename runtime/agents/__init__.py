"""
Agents used by the interview runtime.

For now there is a single InterviewCoordinator that:

- mints avatar tokens and creates sessions
- records prompts / responses through the lifecycle components
- terminates sessions, schedules eviction and notifies the automation
"""
