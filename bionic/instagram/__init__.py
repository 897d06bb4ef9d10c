"""Import of Instagram data downloads."""