from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsSystemAdmin
from loans.models import Loan
from loans.serializers import (
    LoanSerializer,
    LoanRequestSerializer,
    LoanTermsSerializer,
    LoanApprovalSerializer,
    LoanRejectionSerializer,
)
from loans.calculators import calculate_loan_terms
from loans.utils import create_loan, approve_loan, reject_loan, repay_loan


# ——————————————————————————————————————————————————————————————
# 1. Member: list / request / preview / repay
# ——————————————————————————————————————————————————————————————
class LoanListCreateView(generics.ListCreateAPIView):
    queryset = Loan.objects.all()
    serializer_class = LoanSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return self.queryset.filter(user=self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = LoanRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan = create_loan(
            request.user,
            serializer.validated_data["amount"],
            serializer.validated_data["term_days"],
            serializer.validated_data["loan_purpose"],
        )
        return Response(LoanSerializer(loan).data, status=status.HTTP_201_CREATED)


class LoanDetailView(generics.RetrieveAPIView):
    queryset = Loan.objects.all()
    serializer_class = LoanSerializer
    permission_classes = [IsAuthenticated]
    lookup_field = "reference"

    def get_queryset(self):
        return self.queryset.filter(user=self.request.user)


class LoanCalculateView(generics.GenericAPIView):
    serializer_class = LoanRequestSerializer
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        terms = calculate_loan_terms(
            request.user,
            serializer.validated_data["amount"],
            serializer.validated_data["term_days"],
        )
        return Response(LoanTermsSerializer(terms).data, status=status.HTTP_200_OK)


class LoanRepayView(generics.GenericAPIView):
    queryset = Loan.objects.all()
    serializer_class = LoanSerializer
    permission_classes = [IsAuthenticated]
    lookup_field = "reference"

    def get_queryset(self):
        return self.queryset.filter(user=self.request.user)

    def patch(self, request, reference):
        loan = repay_loan(self.get_object())
        return Response(LoanSerializer(loan).data, status=status.HTTP_200_OK)


# ——————————————————————————————————————————————————————————————
# 2. Admin: review and decide
# ——————————————————————————————————————————————————————————————
class AdminLoanListView(generics.ListAPIView):
    queryset = Loan.objects.select_related("user").all()
    serializer_class = LoanSerializer
    permission_classes = [IsSystemAdmin]

    def get_queryset(self):
        queryset = self.queryset
        loan_status = self.request.query_params.get("status")
        if loan_status:
            queryset = queryset.filter(status=loan_status)
        return queryset


class ApproveLoanView(generics.GenericAPIView):
    queryset = Loan.objects.all()
    serializer_class = LoanApprovalSerializer
    permission_classes = [IsSystemAdmin]
    lookup_field = "reference"

    def post(self, request, reference):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan = approve_loan(
            self.get_object(), request.user, serializer.validated_data["admin_notes"]
        )
        return Response(LoanSerializer(loan).data, status=status.HTTP_200_OK)


class RejectLoanView(generics.GenericAPIView):
    queryset = Loan.objects.all()
    serializer_class = LoanRejectionSerializer
    permission_classes = [IsSystemAdmin]
    lookup_field = "reference"

    def post(self, request, reference):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan = reject_loan(
            self.get_object(), request.user, serializer.validated_data["reason"]
        )
        return Response(LoanSerializer(loan).data, status=status.HTTP_200_OK)
