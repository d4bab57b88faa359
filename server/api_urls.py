from rest_framework.routers import DefaultRouter
from django.urls import path, include
from users.views import *
from courses.views import *
from learning.views import *
from quizzes.views import *
from progress.views import *
from certificates.views import *
from payments.views import *


router = DefaultRouter()

# User
router.register(r'users', UserViewset)

# Courses
router.register(r'courses', CourseViewSet, basename='course')
router.register(r'lessons', LessonViewSet, basename='lesson')
router.register(r'invitations', InvitationViewSet, basename='invitation')

# Learning
router.register(r'me/enrollments', EnrollmentViewSet, basename='enrollment')

# Quizzes
router.register(r'quizzes', QuizViewSet, basename='quiz')
router.register(r'quiz-questions', QuizQuestionViewSet, basename='quiz-question')
router.register(r'quiz-options', QuizOptionViewSet, basename='quiz-option')

# Progress
router.register(r'badge-levels', BadgeLevelViewSet, basename='badge-level')


urlpatterns = router.urls + [
    path('auth/', include('users.urls')),

    path('courses/<int:course_pk>/lessons/<int:lesson_pk>/', LessonDetailView.as_view(), name='lesson-content'),
    path('courses/<int:course_pk>/lessons/<int:lesson_pk>/progress/', LessonProgressView.as_view(), name='lesson-progress'),

    path('courses/<int:course_pk>/quizzes/<int:quiz_pk>/', LearnerQuizView.as_view(), name='learner-quiz'),
    path('courses/<int:course_pk>/quizzes/<int:quiz_pk>/attempt/', QuizAttemptView.as_view(), name='quiz-attempt'),
    path('courses/<int:course_pk>/quizzes/<int:quiz_pk>/attempts/', QuizAttemptHistoryView.as_view(), name='quiz-attempts'),

    path('courses/<int:course_pk>/certificate/', CourseCertificateView.as_view(), name='course-certificate'),
    path('certificates/<str:number>/', VerifyCertificateView.as_view(), name='certificate-verify'),

    path('me/points/', MyPointsView.as_view(), name='my-points'),
    path('leaderboard/', LeaderboardView.as_view(), name='leaderboard'),

    path('payments/create-order/', CreateOrderView.as_view(), name='payment-create-order'),
    path('payments/verify/', VerifyPaymentView.as_view(), name='payment-verify'),
]
