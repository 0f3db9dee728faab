from typing import List, Optional
from datetime import datetime

from src.models.view_models import ResultsView, ResultsStatus, PlaceCard, VenueData, ItineraryItem


class ResponseFormatter:
    """Plain-text presentation of the client views"""

    @staticmethod
    def format_duration(minutes: int) -> str:
        """Format a duration in minutes to human-readable format"""
        if minutes < 60:
            return f"{minutes} minutes"
        whole_hours, remainder = divmod(minutes, 60)
        if remainder:
            return f"{whole_hours}h {remainder}m"
        return f"{whole_hours} hour" if whole_hours == 1 else f"{whole_hours} hours"

    @staticmethod
    def format_rating(rating: Optional[float], review_count: Optional[int] = None) -> str:
        """Format rating with a star and review count"""
        if not rating:
            return "No rating"
        text = f"★ {rating}"
        if review_count is not None:
            text += f" ({review_count} reviews)"
        return text

    @staticmethod
    def format_wait_time(minutes: Optional[int]) -> str:
        if minutes is None:
            return "Not available"
        return f"{minutes} mins"

    @staticmethod
    def format_last_updated(timestamp: str) -> str:
        """Local wall-clock time of an ISO timestamp"""
        try:
            return datetime.fromisoformat(timestamp).strftime("%H:%M:%S")
        except ValueError:
            return timestamp

    @staticmethod
    def format_place_card(card: PlaceCard) -> List[str]:
        lines = [f"- {card.name or 'Unnamed Place'}"]
        if card.address:
            lines.append(f"    {card.address}")
        if card.rating:
            lines.append(f"    {ResponseFormatter.format_rating(card.rating, card.user_rating_count)}")
        if card.has_photo:
            photo_line = f"    Photo: {card.photo_url or '(unavailable)'}"
            if card.photo_attribution:
                photo_line += f" by {card.photo_attribution}"
            lines.append(photo_line)
        else:
            lines.append("    No image available")
        return lines

    @staticmethod
    def format_itinerary_item(item: ItineraryItem) -> str:
        return f"{item.time}  {item.title} ({ResponseFormatter.format_duration(item.duration)})"

    @staticmethod
    def format_results(view: ResultsView) -> str:
        """Render a results view as plain text"""
        if view.status == ResultsStatus.ERROR:
            return "\n".join([
                "Error",
                view.error or "",
                f"[{view.action_label}] -> {view.action_href}",
            ])

        lines = [view.heading or "", view.subtitle or "", ""]
        for day in view.days:
            lines.append(f"Day {day.day_number}")
            for slot in day.slots:
                lines.append(f"  {slot.title}")
                lines.append(f"  {slot.description}")
                for card in slot.places:
                    lines.extend(f"  {line}" for line in ResponseFormatter.format_place_card(card))
                lines.append("")
        lines.append(f"[{view.action_label}] -> {view.action_href}")
        return "\n".join(lines)

    @staticmethod
    def format_venue_status(venue: VenueData) -> str:
        lines = [venue.name or venue.venue_id]
        if venue.formatted_address:
            lines.append(venue.formatted_address)
        if venue.rating:
            lines.append(ResponseFormatter.format_rating(venue.rating, venue.user_rating_count))
        lines.append(f"Wait Time: {ResponseFormatter.format_wait_time(venue.current_wait_time)} [{venue.wait_tone or 'gray'}]")
        lines.append(f"Crowd Level: {venue.crowd_level.value} [{venue.crowd_tone}]")
        lines.append("Open now" if venue.is_operational else "Closed")
        for event in venue.special_events:
            lines.append(f"Event: {event}")
        for alert in venue.maintenance_alerts:
            lines.append(f"Alert: {alert}")
        lines.append(f"Last updated: {ResponseFormatter.format_last_updated(venue.last_updated)} (simulated)")
        return "\n".join(lines)
