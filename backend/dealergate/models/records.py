from __future__ import annotations
from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy import String, Integer, JSON, Text, DateTime, text
from typing import Optional, Dict, Any

Base = declarative_base()


class SalesRecord(Base):
    __tablename__ = 'sales_records'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    manager_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    territory: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(128), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    team_comparison: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    manager_notes: Mapped[Optional[str]] = mapped_column(Text)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    def to_json(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'managerId': self.manager_id,
            'territory': self.territory,
            'customerName': self.customer_name,
            'amountCents': self.amount_cents,
            'teamComparison': self.team_comparison,
            'managerNotes': self.manager_notes,
        }


class ServiceTicket(Base):
    __tablename__ = 'service_tickets'
    STATUS_OPEN = 'OPEN'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_CLOSED = 'CLOSED'
    ALL_STATUSES = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_CLOSED)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    technician_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    assigned_manager_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    territory: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(128), nullable=False)
    summary: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=STATUS_OPEN)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    def to_json(self):
        return {
            'id': self.id,
            'technicianId': self.technician_id,
            'assignedManagerId': self.assigned_manager_id,
            'territory': self.territory,
            'customerName': self.customer_name,
            'summary': self.summary,
            'status': self.status,
        }


class Customer(Base):
    __tablename__ = 'customers'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    owner_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    territory: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    profit_margin: Mapped[Optional[int]] = mapped_column(Integer)
    credit_score: Mapped[Optional[int]] = mapped_column(Integer)
    internal_notes: Mapped[Optional[str]] = mapped_column(Text)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    def to_json(self):
        return {
            'id': self.id,
            'name': self.name,
            'ownerId': self.owner_id,
            'territory': self.territory,
            'profitMargin': self.profit_margin,
            'creditScore': self.credit_score,
            'internalNotes': self.internal_notes,
        }


class Payment(Base):
    __tablename__ = 'payments'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(128), nullable=False)
    territory: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    detailed_financials: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    credit_limit_cents: Mapped[Optional[int]] = mapped_column(Integer)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    def to_json(self):
        return {
            'id': self.id,
            'customerName': self.customer_name,
            'territory': self.territory,
            'amountCents': self.amount_cents,
            'detailedFinancials': self.detailed_financials,
            'creditLimits': self.credit_limit_cents,
        }
