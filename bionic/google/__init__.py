"""Import of Google Takeout activity and location history."""