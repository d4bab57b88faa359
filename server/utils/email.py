EMAIL_MESSAGE_TEMPLATES = {
    "course_invitation": (
        "Hello,\n\n"
        "{inviter} has invited you to join the course \"{course_title}\".\n"
        "Sign in with this email address and accept the invitation to start learning.\n\n"
        "The Learning Team."
    ),
    "enrollment_confirmed": (
        "Hello {username},\n\n"
        "You are now enrolled in \"{course_title}\". Happy learning!\n\n"
        "The Learning Team."
    ),
    "certificate_issued": (
        "Hello {username},\n\n"
        "Congratulations on completing \"{course_title}\".\n"
        "Your certificate number is {certificate_number}. "
        "Anyone can verify it using that number.\n\n"
        "The Learning Team."
    ),
}
